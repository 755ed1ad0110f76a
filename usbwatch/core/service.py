"""Service layer used by the CLI, the dashboard, and the public API."""

from __future__ import annotations

from pathlib import Path

from usbwatch.core.config import LoadedConfig, WatchConfig, load_config
from usbwatch.core.lsusb import enumerate_devices
from usbwatch.core.model import Device, RawDevice, Snapshot, TransientKey
from usbwatch.core.poller import Poller
from usbwatch.core.session import SessionState
from usbwatch.core.snapshot import build_snapshot
from usbwatch.core.tty import resolve_terminal_paths


class WatchService:
    def __init__(
        self,
        *,
        config: WatchConfig | None = None,
        config_path: Path | None = None,
    ) -> None:
        if config is None:
            loaded = load_config(config_path)
        else:
            loaded = LoadedConfig(config=config)
        self.config = loaded.config
        self.load_warnings = loaded.warnings

    def raw_devices(self) -> list[RawDevice]:
        return enumerate_devices(self.config.lsusb_command)

    def terminal_paths(self) -> dict[TransientKey, str]:
        return resolve_terminal_paths(
            dev_root=self.config.dev_root,
            sys_root=self.config.sys_root,
            prefixes=self.config.terminal_prefixes,
            probe_count=self.config.terminal_probe_count,
            max_depth=self.config.sysfs_max_depth,
        )

    def snapshot(self) -> Snapshot:
        return build_snapshot(
            enumerate_fn=self.raw_devices,
            resolve_fn=self.terminal_paths,
            markers=self.config.bootloader_markers,
        )

    def list_devices(self) -> list[Device]:
        return list(self.snapshot().devices)

    def new_session(self) -> SessionState:
        return SessionState()

    def new_poller(self, interval_s: float | None = None) -> Poller:
        return Poller(
            self.snapshot,
            interval_s=interval_s if interval_s is not None else self.config.poll_interval_s,
        )

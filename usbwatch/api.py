"""Stable public API for building tooling on top of usbwatch.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from pathlib import Path

from usbwatch.core.config import WatchConfig
from usbwatch.core.errors import (
    ConfigLoadError,
    ConfigValidationError,
    PollerError,
    UsbwatchError,
)
from usbwatch.core.model import (
    Device,
    ModelId,
    RawDevice,
    SessionStats,
    Snapshot,
    TransientKey,
)
from usbwatch.core.poller import Poller
from usbwatch.core.service import WatchService
from usbwatch.core.session import SessionState

__all__ = [
    "UsbwatchError",
    "ConfigLoadError",
    "ConfigValidationError",
    "PollerError",
    "Device",
    "ModelId",
    "RawDevice",
    "SessionStats",
    "Snapshot",
    "TransientKey",
    "WatchConfig",
    "Poller",
    "SessionState",
    "Client",
]


class Client:
    """Public client for interacting with usbwatch core capabilities.

    A `Client` wraps config loading, USB enumeration, serial terminal
    correlation, and background polling behind a stable API intended for
    third-party tools (GUI/TUI/services/scripts).
    """

    def __init__(
        self,
        *,
        config: WatchConfig | None = None,
        config_path: Path | None = None,
    ) -> None:
        self._service = WatchService(config=config, config_path=config_path)

    @property
    def config(self) -> WatchConfig:
        return self._service.config

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    def list_devices(self) -> list[Device]:
        return self._service.list_devices()

    def terminal_paths(self) -> dict[TransientKey, str]:
        return self._service.terminal_paths()

    def snapshot(self) -> Snapshot:
        return self._service.snapshot()

    def new_session(self) -> SessionState:
        return self._service.new_session()

    def new_poller(self, *, interval_s: float | None = None) -> Poller:
        return self._service.new_poller(interval_s)

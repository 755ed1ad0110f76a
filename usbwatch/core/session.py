"""Session state and snapshot reconciliation."""

from __future__ import annotations

import logging

from usbwatch.core.model import Device, SessionStats, Snapshot, TransientKey

LOGGER = logging.getLogger(__name__)


class SessionState:
    """Everything the dashboard remembers between snapshots.

    ``apply`` is the only way a snapshot enters the session. It must be
    called once per delivered snapshot, in delivery order. Selection is
    tracked by transient key so it follows a device when its list position
    changes.
    """

    def __init__(self, stats: SessionStats | None = None) -> None:
        self.devices: tuple[Device, ...] = ()
        self.selected_index: int | None = None
        self.selected_key: TransientKey | None = None
        self.stats = stats or SessionStats()

    def apply(self, snapshot: Snapshot) -> None:
        new_devices = snapshot.devices
        old_keys = {device.transient_key for device in self.devices}
        new_keys = {device.transient_key for device in new_devices}

        if self.stats.refresh_count > 0:
            connected = new_keys - old_keys
            disconnected = old_keys - new_keys
            self.stats.connects += len(connected)
            self.stats.disconnects += len(disconnected)
            if connected or disconnected:
                LOGGER.debug(
                    "Reconciled snapshot: +%s -%s",
                    sorted(str(k) for k in connected),
                    sorted(str(k) for k in disconnected),
                )

        self.devices = new_devices
        self.stats.refresh_count += 1
        self.stats.last_latency_s = snapshot.elapsed_s
        self.stats.peak_devices = max(self.stats.peak_devices, len(new_devices))
        for device in new_devices:
            self.stats.models_seen.add(device.model_id)
            if device.is_bootloader_mode:
                self.stats.bootloader_models_seen.add(device.model_id)

        self._restore_selection()

    def _restore_selection(self) -> None:
        if not self.devices:
            self.selected_index = None
            self.selected_key = None
            return

        if self.selected_key is None:
            self._select(0)
            return

        for index, device in enumerate(self.devices):
            if device.transient_key == self.selected_key:
                self.selected_index = index
                return

        # Selected device is gone: keep the old position, clamped to the new list.
        previous = self.selected_index or 0
        self._select(min(previous, len(self.devices) - 1))

    def select_next(self) -> None:
        if not self.devices:
            return
        if self.selected_index is None or self.selected_index >= len(self.devices) - 1:
            self._select(0)
        else:
            self._select(self.selected_index + 1)

    def select_previous(self) -> None:
        if not self.devices:
            return
        if self.selected_index is None:
            self._select(0)
        elif self.selected_index == 0:
            self._select(len(self.devices) - 1)
        else:
            self._select(self.selected_index - 1)

    @property
    def selected_device(self) -> Device | None:
        if self.selected_index is None or self.selected_index >= len(self.devices):
            return None
        return self.devices[self.selected_index]

    @property
    def bootloader_count(self) -> int:
        return sum(1 for device in self.devices if device.is_bootloader_mode)

    def _select(self, index: int) -> None:
        self.selected_index = index
        self.selected_key = self.devices[index].transient_key

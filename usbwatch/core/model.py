"""Core data models shared by the discovery engine, session state, and UI."""

from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass(frozen=True, order=True)
class TransientKey:
    """(bus, address) identity, valid while a device stays plugged in."""

    bus: int
    address: int

    def __str__(self) -> str:
        return f"{self.bus:03d}:{self.address:03d}"


@dataclass(frozen=True, order=True)
class ModelId:
    """(vendor, product) identity, stable across replugs of the same model."""

    vendor_id: str
    product_id: str

    def __str__(self) -> str:
        return f"{self.vendor_id}:{self.product_id}"


@dataclass(frozen=True)
class RawDevice:
    bus: str
    address: str
    vendor_id: str
    product_id: str
    name: str


@dataclass(frozen=True)
class Device:
    bus: str
    address: str
    vendor_id: str
    product_id: str
    display_name: str
    is_bootloader_mode: bool
    raw_device_path: str
    terminal_path: str | None = None

    @property
    def transient_key(self) -> TransientKey:
        return TransientKey(bus=_to_int(self.bus), address=_to_int(self.address))

    @property
    def model_id(self) -> ModelId:
        return ModelId(vendor_id=self.vendor_id, product_id=self.product_id)

    @property
    def display_path(self) -> str:
        return self.terminal_path or self.raw_device_path


@dataclass(frozen=True)
class Snapshot:
    devices: tuple[Device, ...]
    elapsed_s: float


@dataclass
class SessionStats:
    start_time: float = field(default_factory=time.monotonic)
    refresh_count: int = 0
    models_seen: set[ModelId] = field(default_factory=set)
    bootloader_models_seen: set[ModelId] = field(default_factory=set)
    last_latency_s: float = 0.0
    peak_devices: int = 0
    connects: int = 0
    disconnects: int = 0

    def uptime_s(self, now: float | None = None) -> float:
        current = time.monotonic() if now is None else now
        return max(0.0, current - self.start_time)

    def refresh_rate(self, now: float | None = None) -> float:
        elapsed = self.uptime_s(now)
        if elapsed > 0:
            return self.refresh_count / elapsed
        return 0.0

    def format_uptime(self, now: float | None = None) -> str:
        secs = int(self.uptime_s(now))
        hours, rest = divmod(secs, 3600)
        mins, secs = divmod(rest, 60)
        if hours > 0:
            return f"{hours:02d}:{mins:02d}:{secs:02d}"
        return f"{mins:02d}:{secs:02d}"


_U32_MAX = 2**32 - 1


def _to_int(value: str) -> int:
    # Plain ASCII decimal only; signs, underscores and other digit scripts map to 0.
    if not (value.isascii() and value.isdigit()):
        return 0
    number = int(value)
    return number if number <= _U32_MAX else 0

"""Combine enumeration and terminal-path resolution into one snapshot."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import replace

from usbwatch.core.lsusb import DEFAULT_BOOTLOADER_MARKERS, enumerate_devices, is_bootloader_name
from usbwatch.core.model import Device, RawDevice, Snapshot, TransientKey
from usbwatch.core.tty import resolve_terminal_paths

EnumerateFn = Callable[[], Sequence[RawDevice]]
ResolveFn = Callable[[], Mapping[TransientKey, str]]


def build_device(
    raw: RawDevice,
    terminal_paths: Mapping[TransientKey, str],
    *,
    markers: Iterable[str] = DEFAULT_BOOTLOADER_MARKERS,
) -> Device:
    device = Device(
        bus=raw.bus,
        address=raw.address,
        vendor_id=raw.vendor_id,
        product_id=raw.product_id,
        display_name=raw.name,
        is_bootloader_mode=is_bootloader_name(raw.name, markers),
        raw_device_path=f"/dev/bus/usb/{raw.bus}/{raw.address}",
    )
    return replace(device, terminal_path=terminal_paths.get(device.transient_key))


def build_snapshot(
    *,
    enumerate_fn: EnumerateFn = enumerate_devices,
    resolve_fn: ResolveFn = resolve_terminal_paths,
    markers: Iterable[str] = DEFAULT_BOOTLOADER_MARKERS,
) -> Snapshot:
    """Enumerate, resolve terminal paths, and join them, timing the whole pass."""
    markers = tuple(markers)
    start = time.perf_counter()
    raw_devices = enumerate_fn()
    terminal_paths = resolve_fn()
    devices = tuple(build_device(raw, terminal_paths, markers=markers) for raw in raw_devices)
    elapsed = time.perf_counter() - start
    return Snapshot(devices=devices, elapsed_s=elapsed)

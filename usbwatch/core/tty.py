"""Map USB (bus, address) pairs to serial terminal device nodes via sysfs."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from usbwatch.core.model import TransientKey

DEFAULT_DEV_ROOT = "/dev"
DEFAULT_SYS_ROOT = "/sys"
DEFAULT_PREFIXES: tuple[str, ...] = ("ttyUSB", "ttyACM")
DEFAULT_PROBE_COUNT = 16
DEFAULT_MAX_DEPTH = 5
LOGGER = logging.getLogger(__name__)


def resolve_terminal_paths(
    *,
    dev_root: str | Path = DEFAULT_DEV_ROOT,
    sys_root: str | Path = DEFAULT_SYS_ROOT,
    prefixes: Sequence[str] = DEFAULT_PREFIXES,
    probe_count: int = DEFAULT_PROBE_COUNT,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> dict[TransientKey, str]:
    """Build a ``TransientKey -> /dev/ttyXXX`` map.

    Entries from ``/dev/serial/by-id`` are collected first; a direct probe of
    ``<prefix>0`` .. ``<prefix>N`` then fills in keys that are still missing.
    Anything that cannot be resolved is left out.
    """
    dev_root = Path(dev_root)
    sys_root = Path(sys_root)
    mapping: dict[TransientKey, str] = {}

    for tty_name in _by_id_tty_names(dev_root / "serial" / "by-id", prefixes):
        key = tty_bus_address(tty_name, sys_root=sys_root, max_depth=max_depth)
        if key is not None and key not in mapping:
            mapping[key] = str(dev_root / tty_name)

    for prefix in prefixes:
        for index in range(probe_count):
            tty_name = f"{prefix}{index}"
            key = tty_bus_address(tty_name, sys_root=sys_root, max_depth=max_depth)
            if key is not None:
                mapping.setdefault(key, str(dev_root / tty_name))

    return mapping


def tty_bus_address(
    tty_name: str,
    *,
    sys_root: str | Path = DEFAULT_SYS_ROOT,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> TransientKey | None:
    """Find the USB device that owns ``tty_name``.

    Follows ``/sys/class/tty/<name>/device`` to its real location and walks
    up at most ``max_depth`` parents until a directory carries both
    ``busnum`` and ``devnum``.
    """
    device_link = Path(sys_root) / "class" / "tty" / tty_name / "device"
    if not os.path.lexists(device_link):
        return None
    try:
        current = device_link.resolve(strict=True)
    except (OSError, RuntimeError):
        return None

    for _ in range(max_depth):
        parent = current.parent
        if parent == current:
            return None
        current = parent
        busnum_path = current / "busnum"
        devnum_path = current / "devnum"
        if busnum_path.exists() and devnum_path.exists():
            try:
                bus = int(busnum_path.read_text(encoding="utf-8").strip())
                address = int(devnum_path.read_text(encoding="utf-8").strip())
            except (OSError, ValueError) as exc:
                LOGGER.debug("Unreadable busnum/devnum under %s: %s", current, exc)
                return None
            return TransientKey(bus=bus, address=address)

    return None


def _by_id_tty_names(by_id_dir: Path, prefixes: Sequence[str]) -> list[str]:
    if not by_id_dir.is_dir():
        return []
    try:
        entries = sorted(by_id_dir.iterdir())
    except OSError:
        return []

    names: list[str] = []
    for entry in entries:
        try:
            target = os.readlink(entry)
        except OSError:
            continue
        tty_name = target.removeprefix("../../")
        if tty_name == target or "/" in tty_name:
            continue
        if tty_name.startswith(tuple(prefixes)):
            names.append(tty_name)
    return names

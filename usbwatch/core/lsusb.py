"""USB enumeration by parsing ``lsusb`` output."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable, Sequence

from usbwatch.core.model import RawDevice

DEFAULT_COMMAND: tuple[str, ...] = ("lsusb",)
DEFAULT_BOOTLOADER_MARKERS: tuple[str, ...] = ("dfu", "download", "boot")
UNKNOWN_NAME = "Unknown"
DEFAULT_TIMEOUT_S = 2.0
LOGGER = logging.getLogger(__name__)


def enumerate_devices(
    command: Sequence[str] = DEFAULT_COMMAND,
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> list[RawDevice]:
    """Run the enumeration tool and parse every usable line.

    Returns an empty list when the tool cannot be started or does not finish
    within ``timeout_s``. The exit code is ignored: whatever made it to stdout
    is parsed.
    """
    result = _run_enumeration_command(command, timeout_s)
    if result is None:
        return []
    stdout = result.stdout.decode("utf-8", errors="replace")
    return parse_lsusb_output(stdout)


def parse_lsusb_output(text: str) -> list[RawDevice]:
    # Only \n ends a record; names may carry other line-break characters.
    lines = (line.removesuffix("\r") for line in text.split("\n"))
    return [device for device in map(parse_lsusb_line, lines) if device is not None]


def parse_lsusb_line(line: str) -> RawDevice | None:
    """Parse ``Bus 001 Device 002: ID 1234:5678 Device Name``.

    Returns None for any line that does not have that shape.
    """
    prefix, sep, suffix = line.partition(": ID ")
    if not sep:
        return None

    prefix_parts = prefix.split()
    if len(prefix_parts) < 4:
        return None
    bus = prefix_parts[1]
    address = prefix_parts[3]

    id_part, _, name = suffix.partition(" ")
    id_parts = id_part.split(":")
    if len(id_parts) != 2:
        return None
    vendor_id, product_id = id_parts

    return RawDevice(
        bus=bus,
        address=address,
        vendor_id=vendor_id,
        product_id=product_id,
        name=name or UNKNOWN_NAME,
    )


def is_bootloader_name(name: str, markers: Iterable[str] = DEFAULT_BOOTLOADER_MARKERS) -> bool:
    lower_name = name.lower()
    return any(marker.lower() in lower_name for marker in markers)


def _run_enumeration_command(cmd: Sequence[str], timeout_s: float) -> subprocess.CompletedProcess[bytes] | None:
    try:
        return subprocess.run(
            list(cmd),
            check=False,
            capture_output=True,
            timeout=timeout_s,
        )
    except subprocess.TimeoutExpired:
        LOGGER.debug("%s did not finish within %.1fs", " ".join(cmd), timeout_s)
        return None
    except OSError as exc:
        LOGGER.debug("Could not run %s: %s", " ".join(cmd), exc)
        return None

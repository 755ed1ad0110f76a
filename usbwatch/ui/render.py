"""Pure formatting helpers turning session state into rich renderables."""

from __future__ import annotations

from rich.text import Text

from usbwatch.core.model import Device, SessionStats
from usbwatch.core.session import SessionState

LABEL_STYLE = "bright_black"
_LABEL_WIDTH = 9
_STATS_LABEL_WIDTH = 13


def latency_style(latency_ms: float) -> str:
    if latency_ms < 10.0:
        return "green"
    if latency_ms < 50.0:
        return "yellow"
    return "red"


def header_text(session: SessionState, now: float | None = None) -> Text:
    text = Text()
    text.append("USB Devices ", style="bold cyan")
    text.append(f"({len(session.devices)})", style=LABEL_STYLE)
    dfu_count = session.bootloader_count
    if dfu_count > 0:
        text.append("  ")
        text.append(f" {dfu_count} DFU ", style="bold white on magenta")
    text.append("  ")
    text.append(f"uptime {session.stats.format_uptime(now)}", style=LABEL_STYLE)
    return text


def device_row(device: Device) -> Text:
    text = Text()
    text.append(device.display_name, style="bold yellow" if device.is_bootloader_mode else "")
    text.append(" ")
    text.append(device.display_path, style="green" if device.terminal_path else LABEL_STYLE)
    return text


def device_list_text(session: SessionState) -> Text:
    text = Text()
    for index, device in enumerate(session.devices):
        if index:
            text.append("\n")
        row = device_row(device)
        if index == session.selected_index:
            text.append("▶ ", style="bold")
            row.stylize("bold on grey30")
        else:
            text.append("  ")
        text.append_text(row)
    return text


def _field(text: Text, label: str, value: str, style: str = "") -> None:
    text.append(label.ljust(_LABEL_WIDTH), style=LABEL_STYLE)
    text.append(value, style=style)
    text.append("\n")


def details_text(device: Device | None) -> Text:
    if device is None:
        return Text("No device selected", style=LABEL_STYLE)

    text = Text()
    _field(text, "Name", device.display_name, "bold")
    text.append("\n")
    _field(text, "ID", str(device.model_id), "cyan")
    _field(text, "Bus", device.bus)
    _field(text, "Device", device.address)
    _field(text, "Vendor", device.vendor_id)
    _field(text, "Product", device.product_id)
    text.append("\n")
    _field(text, "Path", device.raw_device_path, "green")
    if device.terminal_path:
        _field(text, "TTY", device.terminal_path, "bold green")
    if device.is_bootloader_mode:
        text.append("\n")
        text.append("⚡ DFU Mode", style="bold yellow")
    text.rstrip()
    return text


def stats_text(stats: SessionStats, now: float | None = None) -> Text:
    latency_ms = stats.last_latency_s * 1000.0
    text = Text()
    text.append("─── Stats ───\n", style=LABEL_STYLE)

    text.append("Refreshes".ljust(_STATS_LABEL_WIDTH), style=LABEL_STYLE)
    text.append(str(stats.refresh_count), style="green")
    text.append(f" ({stats.refresh_rate(now):.1f}/s)\n", style=LABEL_STYLE)

    text.append("Latency".ljust(_STATS_LABEL_WIDTH), style=LABEL_STYLE)
    text.append(f"{latency_ms:.2f}ms\n", style=latency_style(latency_ms))

    text.append("Peak".ljust(_STATS_LABEL_WIDTH), style=LABEL_STYLE)
    text.append(f"{stats.peak_devices} devices\n")

    text.append("Ever seen".ljust(_STATS_LABEL_WIDTH), style=LABEL_STYLE)
    text.append(f"{len(stats.models_seen)} unique\n")

    text.append("DFU seen".ljust(_STATS_LABEL_WIDTH), style=LABEL_STYLE)
    if stats.bootloader_models_seen:
        text.append(f"{len(stats.bootloader_models_seen)}\n", style="bold magenta")
    else:
        text.append("none\n", style=LABEL_STYLE)

    text.append("Connects".ljust(_STATS_LABEL_WIDTH), style=LABEL_STYLE)
    text.append(f"+{stats.connects}", style="green")
    text.append(" / ")
    text.append(f"-{stats.disconnects}", style="red")
    return text


def footer_text(stats: SessionStats) -> Text:
    text = Text(style=LABEL_STYLE)
    text.append("●" if stats.refresh_count % 2 == 0 else "○", style="green")
    text.append(" ")
    text.append("↑/↓", style="cyan")
    text.append(" navigate  ")
    text.append("r", style="cyan")
    text.append(" refresh  ")
    text.append("q", style="cyan")
    text.append(" quit")
    return text

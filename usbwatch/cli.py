"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from usbwatch.core.errors import UsbwatchError
from usbwatch.core.service import WatchService

app = typer.Typer(help="Live USB device dashboard with serial terminal correlation")


def _build_service(ctx: typer.Context) -> WatchService:
    service = WatchService(config_path=ctx.obj)
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging on stderr"),
    config: Path | None = typer.Option(None, "--config", help="Path to a usbwatch config.yaml"),
) -> None:
    """Watch USB devices; runs the live dashboard when no command is given."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config
    if ctx.invoked_subcommand is None:
        watch(ctx, interval_ms=None)


@app.command("watch")
def watch(
    ctx: typer.Context,
    interval_ms: int | None = typer.Option(
        None, "--interval-ms", min=10, max=10000, help="Polling interval in milliseconds"
    ),
) -> None:
    """Run the live dashboard."""
    from usbwatch.ui.dashboard import run_dashboard

    try:
        service = _build_service(ctx)
        interval_s = interval_ms / 1000.0 if interval_ms is not None else None
        run_dashboard(service.new_session(), service.new_poller(interval_s))
    except UsbwatchError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("list")
def list_devices(ctx: typer.Context) -> None:
    """Take one snapshot and print the attached USB devices."""
    try:
        service = _build_service(ctx)
        snapshot = service.snapshot()
        if not snapshot.devices:
            typer.echo("No USB devices found")
            return

        for device in snapshot.devices:
            line = f"{device.bus}:{device.address} {device.model_id} {device.display_name} {device.display_path}"
            if device.is_bootloader_mode:
                line += " [DFU]"
            typer.echo(line)
        typer.echo(f"{len(snapshot.devices)} devices in {snapshot.elapsed_s * 1000.0:.2f}ms")
    except UsbwatchError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("ttys")
def list_ttys(ctx: typer.Context) -> None:
    """Print the serial terminals that could be tied to a USB bus/address."""
    try:
        service = _build_service(ctx)
        mapping = service.terminal_paths()
        if not mapping:
            typer.echo("No serial terminals found")
            return

        for key, path in sorted(mapping.items()):
            typer.echo(f"{key} -> {path}")
    except UsbwatchError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()

from __future__ import annotations

from typer.testing import CliRunner

from usbwatch import cli
from usbwatch.core.model import Device, Snapshot, TransientKey


def _devices() -> tuple[Device, ...]:
    return (
        Device(
            bus="001",
            address="004",
            vendor_id="0483",
            product_id="df11",
            display_name="STM Device in DFU Mode",
            is_bootloader_mode=True,
            raw_device_path="/dev/bus/usb/001/004",
        ),
        Device(
            bus="001",
            address="007",
            vendor_id="0403",
            product_id="6001",
            display_name="FT232R USB UART",
            is_bootloader_mode=False,
            raw_device_path="/dev/bus/usb/001/007",
            terminal_path="/dev/ttyUSB0",
        ),
    )


class FakeService:
    def __init__(self, *, config_path=None) -> None:
        self.config_path = config_path
        self.load_warnings = ()

    def snapshot(self):
        return Snapshot(devices=_devices(), elapsed_s=0.0042)

    def terminal_paths(self):
        return {TransientKey(1, 7): "/dev/ttyUSB0", TransientKey(1, 2): "/dev/ttyACM0"}


runner = CliRunner()


def test_list_command(monkeypatch):
    monkeypatch.setattr(cli, "WatchService", FakeService)
    result = runner.invoke(cli.app, ["list"])
    assert result.exit_code == 0
    assert "001:004 0483:df11 STM Device in DFU Mode /dev/bus/usb/001/004 [DFU]" in result.stdout
    assert "001:007 0403:6001 FT232R USB UART /dev/ttyUSB0" in result.stdout
    assert "2 devices in 4.20ms" in result.stdout


def test_list_command_without_devices(monkeypatch):
    class EmptyService(FakeService):
        def snapshot(self):
            return Snapshot(devices=(), elapsed_s=0.001)

    monkeypatch.setattr(cli, "WatchService", EmptyService)
    result = runner.invoke(cli.app, ["list"])
    assert result.exit_code == 0
    assert "No USB devices found" in result.stdout


def test_ttys_command_sorted_by_key(monkeypatch):
    monkeypatch.setattr(cli, "WatchService", FakeService)
    result = runner.invoke(cli.app, ["ttys"])
    assert result.exit_code == 0
    lines = result.stdout.strip().splitlines()
    assert lines == ["001:002 -> /dev/ttyACM0", "001:007 -> /dev/ttyUSB0"]


def test_config_option_is_passed_to_service(monkeypatch, tmp_path):
    seen = {}

    class RecordingService(FakeService):
        def __init__(self, *, config_path=None) -> None:
            super().__init__(config_path=config_path)
            seen["config_path"] = config_path

    monkeypatch.setattr(cli, "WatchService", RecordingService)
    config = tmp_path / "usbwatch.yaml"
    result = runner.invoke(cli.app, ["--config", str(config), "list"])
    assert result.exit_code == 0
    assert seen["config_path"] == config


def test_config_error_is_clean(monkeypatch):
    class FailingService(FakeService):
        def __init__(self, *, config_path=None) -> None:
            from usbwatch.core.errors import ConfigValidationError

            raise ConfigValidationError("Schema validation failed for config.yaml (poll_interval_ms)")

    monkeypatch.setattr(cli, "WatchService", FailingService)
    result = runner.invoke(cli.app, ["list"])
    assert result.exit_code == 1
    assert "Error: Schema validation failed" in result.stderr
    assert "Traceback" not in result.stdout
    assert "Traceback" not in result.stderr


def test_config_warning_is_printed(monkeypatch):
    class WarnService(FakeService):
        def __init__(self, *, config_path=None) -> None:
            super().__init__(config_path=config_path)
            self.load_warnings = ("config.yaml: no bootloader markers configured; DFU detection is disabled",)

    monkeypatch.setattr(cli, "WatchService", WarnService)
    result = runner.invoke(cli.app, ["ttys"])
    assert result.exit_code == 0
    assert "Warning: config.yaml: no bootloader markers configured" in result.stderr


def test_watch_command_wires_session_and_poller(monkeypatch):
    import usbwatch.ui.dashboard as dashboard

    calls = {}

    class WatchableService(FakeService):
        def new_session(self):
            return "session"

        def new_poller(self, interval_s=None):
            calls["interval_s"] = interval_s
            return "poller"

    def fake_run_dashboard(session, poller):
        calls["run"] = (session, poller)

    monkeypatch.setattr(cli, "WatchService", WatchableService)
    monkeypatch.setattr(dashboard, "run_dashboard", fake_run_dashboard)
    result = runner.invoke(cli.app, ["watch", "--interval-ms", "500"])
    assert result.exit_code == 0
    assert calls == {"interval_s": 0.5, "run": ("session", "poller")}

from __future__ import annotations

import threading

import pytest

from usbwatch.core.errors import PollerError
from usbwatch.core.model import Snapshot
from usbwatch.core.poller import Poller


class CountingBuilder:
    def __init__(self) -> None:
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self) -> Snapshot:
        with self._lock:
            self.calls += 1
            return Snapshot(devices=(), elapsed_s=float(self.calls))


def test_first_snapshot_arrives_without_waiting_full_interval() -> None:
    builder = CountingBuilder()
    with Poller(builder, interval_s=30.0) as poller:
        snapshot = poller.wait_for_snapshot(2.0)

    assert snapshot is not None
    assert snapshot.elapsed_s == 1.0


def test_refresh_signal_preempts_wait() -> None:
    builder = CountingBuilder()
    with Poller(builder, interval_s=30.0) as poller:
        assert poller.wait_for_snapshot(2.0) is not None
        poller.request_refresh()
        second = poller.wait_for_snapshot(2.0)

    assert second is not None
    assert second.elapsed_s == 2.0


def test_timeout_triggers_periodic_snapshots() -> None:
    builder = CountingBuilder()
    with Poller(builder, interval_s=0.01) as poller:
        seen = [poller.wait_for_snapshot(2.0) for _ in range(3)]

    assert all(s is not None for s in seen)
    assert builder.calls >= 3


def test_slow_consumer_only_sees_latest() -> None:
    poller = Poller(CountingBuilder())
    first = Snapshot(devices=(), elapsed_s=1.0)
    second = Snapshot(devices=(), elapsed_s=2.0)

    assert poller._publish(first)
    assert poller._publish(second)

    assert poller.drain_latest() is second
    assert poller.drain_latest() is None


def test_drain_is_non_blocking_when_empty() -> None:
    poller = Poller(CountingBuilder())
    assert poller.drain_latest() is None


def test_worker_exits_when_closed_mid_build() -> None:
    gate = threading.Event()
    entered = threading.Event()

    def slow_build() -> Snapshot:
        entered.set()
        gate.wait(5.0)
        return Snapshot(devices=(), elapsed_s=0.0)

    poller = Poller(slow_build, interval_s=30.0)
    poller.start()
    assert entered.wait(2.0)

    releaser = threading.Timer(0.05, gate.set)
    releaser.start()
    poller.close()
    releaser.join()

    assert not poller.is_running
    assert poller.drain_latest() is None


def test_build_failure_skips_cycle(caplog: pytest.LogCaptureFixture) -> None:
    calls = {"n": 0}

    def flaky_build() -> Snapshot:
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("boom")
        return Snapshot(devices=(), elapsed_s=0.5)

    with Poller(flaky_build, interval_s=0.01) as poller:
        snapshot = poller.wait_for_snapshot(2.0)

    assert snapshot is not None
    assert snapshot.elapsed_s == 0.5
    assert "Snapshot build failed" in caplog.text


def test_start_twice_is_rejected() -> None:
    poller = Poller(CountingBuilder(), interval_s=30.0)
    poller.start()
    try:
        with pytest.raises(PollerError):
            poller.start()
    finally:
        poller.close()


def test_non_positive_interval_is_rejected() -> None:
    with pytest.raises(PollerError):
        Poller(CountingBuilder(), interval_s=0)

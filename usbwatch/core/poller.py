"""Background snapshot producer.

The poller owns one worker thread and talks to the consumer through two
one-way queues: refresh signals flow in, snapshots flow out. The outbound
queue holds a single slot, so a slow consumer only ever sees the newest
snapshot and the worker never blocks on it.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable

from usbwatch.core.errors import PollerError
from usbwatch.core.model import Snapshot

DEFAULT_INTERVAL_S = 0.2
_JOIN_TIMEOUT_S = 5.0
LOGGER = logging.getLogger(__name__)


class Poller:
    def __init__(
        self,
        build_fn: Callable[[], Snapshot],
        *,
        interval_s: float = DEFAULT_INTERVAL_S,
    ) -> None:
        if interval_s <= 0:
            raise PollerError(f"Poll interval must be positive, got {interval_s}")
        self._build_fn = build_fn
        self._interval_s = interval_s
        self._refresh: queue.Queue[None] = queue.Queue()
        self._snapshots: queue.Queue[Snapshot] = queue.Queue(maxsize=1)
        self._closed = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval_s(self) -> float:
        return self._interval_s

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            raise PollerError("Poller already started")
        if self._closed.is_set():
            raise PollerError("Poller is closed")
        self._thread = threading.Thread(target=self._run, name="usbwatch-poller", daemon=True)
        self.request_refresh()
        self._thread.start()
        LOGGER.debug("Poller started (interval %.3fs)", self._interval_s)

    def request_refresh(self) -> None:
        """Ask for a snapshot now instead of at the end of the current wait."""
        self._refresh.put_nowait(None)

    def drain_latest(self) -> Snapshot | None:
        """Return the newest published snapshot without blocking."""
        latest: Snapshot | None = None
        while True:
            try:
                latest = self._snapshots.get_nowait()
            except queue.Empty:
                return latest

    def wait_for_snapshot(self, timeout_s: float) -> Snapshot | None:
        try:
            return self._snapshots.get(timeout=timeout_s)
        except queue.Empty:
            return None

    def close(self) -> None:
        self._closed.set()
        self._refresh.put_nowait(None)
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=_JOIN_TIMEOUT_S)
        LOGGER.debug("Poller closed")

    def __enter__(self) -> Poller:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _run(self) -> None:
        while not self._closed.is_set():
            try:
                self._refresh.get(timeout=self._interval_s)
            except queue.Empty:
                pass
            if self._closed.is_set():
                break

            try:
                snapshot = self._build_fn()
            except Exception:
                LOGGER.exception("Snapshot build failed; skipping this cycle")
                continue

            if not self._publish(snapshot):
                break

    def _publish(self, snapshot: Snapshot) -> bool:
        if self._closed.is_set():
            return False
        while True:
            try:
                self._snapshots.put_nowait(snapshot)
                return True
            except queue.Full:
                try:
                    self._snapshots.get_nowait()
                except queue.Empty:
                    pass

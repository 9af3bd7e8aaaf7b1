"""Single-flight registry: one in-flight computation per key.

Concurrent callers asking for the same key while a computation is running
wait on the running one instead of starting their own, and all of them
observe the same outcome (value or exception)::

    flight = SingleFlight()
    record = flight.do("BTC", lambda: fetch("BTC"))
"""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Callable, Generic, TypeVar

from pricecache.models.asset import normalize_ticker

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Per-key request coalescing for threaded callers.

    The leader (first caller for a key) runs the producer on its own
    thread. The registry entry is dropped before the shared future is
    settled, whatever the outcome, so a failing producer never wedges its
    key.

    Args:
        wait_timeout: Seconds a joining caller waits for the leader before
            giving up with ``TimeoutError``. ``None`` waits forever.
    """

    def __init__(self, wait_timeout: float | None = None) -> None:
        self.wait_timeout = wait_timeout
        self._calls: dict[str, Future[T]] = {}
        self._lock = threading.Lock()

    def do(self, key: str, producer: Callable[[], T]) -> T:
        key = normalize_ticker(key)
        with self._lock:
            future = self._calls.get(key)
            leader = future is None
            if leader:
                future = Future()
                self._calls[key] = future

        assert future is not None
        if not leader:
            return future.result(timeout=self.wait_timeout)

        try:
            value = producer()
        except BaseException as exc:
            self._forget(key)
            future.set_exception(exc)
            raise
        self._forget(key)
        future.set_result(value)
        return value

    def in_flight(self, key: str) -> bool:
        with self._lock:
            return normalize_ticker(key) in self._calls

    def __len__(self) -> int:
        with self._lock:
            return len(self._calls)

    def _forget(self, key: str) -> None:
        with self._lock:
            self._calls.pop(key, None)

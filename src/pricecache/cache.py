"""Price cache backends — Memory (TTL) and no-op."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable

from pricecache.models.asset import normalize_ticker
from pricecache.models.price import PriceRecord, utc_now


class PriceCache(ABC):
    """Abstract cache interface, keyed by normalized ticker."""

    @abstractmethod
    def get(self, ticker: str) -> PriceRecord | None:
        """Return a fresh cached record, or None on miss."""
        ...

    @abstractmethod
    def put(self, ticker: str, record: PriceRecord) -> None:
        """Store a record, replacing any previous one."""
        ...

    @abstractmethod
    def clear(self, ticker: str) -> None:
        ...

    @abstractmethod
    def clear_all(self) -> None:
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...


class NoCache(PriceCache):
    """No-op cache — always misses."""

    def get(self, ticker):  # type: ignore[override]
        return None

    def put(self, ticker, record):  # type: ignore[override]
        pass

    def clear(self, ticker):  # type: ignore[override]
        pass

    def clear_all(self):
        pass

    def __len__(self):
        return 0


class MemoryPriceCache(PriceCache):
    """In-memory TTL cache of the latest price per ticker.

    Freshness is derived from ``record.retrieved_at`` at read time. Stale
    entries stay in place until a newer record overwrites them; the key
    space is one portfolio's worth of tickers so there is no eviction.
    """

    def __init__(
        self,
        ttl_seconds: float = 60,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._store: dict[str, PriceRecord] = {}
        self._lock = threading.Lock()

    def get(self, ticker: str) -> PriceRecord | None:
        key = normalize_ticker(ticker)
        with self._lock:
            record = self._store.get(key)
        if record is None:
            return None
        if self._clock() - record.retrieved_at >= self.ttl:
            return None
        return record

    def peek(self, ticker: str) -> PriceRecord | None:
        """Return the stored record regardless of freshness."""
        with self._lock:
            return self._store.get(normalize_ticker(ticker))

    def put(self, ticker: str, record: PriceRecord) -> None:
        if record is None:
            raise ValueError("refusing to cache an empty price record")
        key = normalize_ticker(ticker)
        with self._lock:
            self._store[key] = record

    def clear(self, ticker: str) -> None:
        with self._lock:
            self._store.pop(normalize_ticker(ticker), None)

    def clear_all(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

"""Mock provider for testing and CI — no network access."""

from __future__ import annotations

import threading
from decimal import Decimal
from typing import Any

from pricecache.config import AssetClass
from pricecache.errors import PriceError, PriceErrorCode
from pricecache.models.asset import normalize_ticker
from pricecache.models.result import FetchResult
from pricecache.providers.base import BasePriceProvider


class MockProvider(BasePriceProvider):
    """In-memory provider that returns configurable static prices.

    Use ``set_price`` / ``set_failure`` to pre-load outcomes. Unknown
    tickers yield ``NO_DATA``. ``calls`` counts uncached fetches, and a
    ``gate`` event, when given, holds every fetch open until it is set.
    """

    name = "mock"
    asset_class = AssetClass.EQUITY
    platform = "Mock Exchange"
    source = "Mock"

    def __init__(
        self,
        *args: Any,
        gate: threading.Event | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.gate = gate
        self.calls: dict[str, int] = {}
        self._prices: dict[str, Decimal] = {}
        self._failures: dict[str, PriceErrorCode] = {}
        self._lock = threading.Lock()

    # --- Pre-load helpers ---

    def set_price(self, ticker: str, price: Decimal | float | int | str) -> None:
        key = normalize_ticker(ticker)
        self._prices[key] = Decimal(str(price))
        self._failures.pop(key, None)

    def set_failure(self, ticker: str, code: PriceErrorCode = PriceErrorCode.TRANSPORT_ERROR) -> None:
        key = normalize_ticker(ticker)
        self._failures[key] = code

    def call_count(self, ticker: str | None = None) -> int:
        with self._lock:
            if ticker is None:
                return sum(self.calls.values())
            return self.calls.get(normalize_ticker(ticker), 0)

    # --- Provider implementation ---

    def _fetch_uncached(self, ticker: str) -> FetchResult:
        with self._lock:
            self.calls[ticker] = self.calls.get(ticker, 0) + 1
        if self.gate is not None:
            self.gate.wait()

        if ticker in self._failures:
            raise PriceError(f"mock failure for {ticker}", code=self._failures[ticker])
        if ticker not in self._prices:
            return FetchResult.failed(PriceErrorCode.NO_DATA, f"no mock price for {ticker}")
        return FetchResult.success(self._record(ticker, self._prices[ticker]))

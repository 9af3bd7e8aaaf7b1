"""Abstract base class for price providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Callable

from pricecache.cache import MemoryPriceCache, PriceCache
from pricecache.config import AssetClass
from pricecache.errors import PriceError, PriceErrorCode
from pricecache.models.asset import normalize_ticker
from pricecache.models.price import PriceRecord, utc_now
from pricecache.models.result import FetchResult
from pricecache.singleflight import SingleFlight
from pricecache.transport import HttpTransport

logger = logging.getLogger(__name__)


class BasePriceProvider(ABC):
    """Abstract base for all price providers.

    Subclasses implement ``_fetch_uncached``, which does the network work
    for one ticker and either returns a ``FetchResult`` or raises
    ``PriceError``. The base class wraps it in the shared discipline:
    cache lookup, single-flight join, cache population, and conversion of
    every failure into an absent result. ``fetch_price`` never raises.

    Each provider instance owns its cache and in-flight registry, so two
    providers never share keys.
    """

    name: str = "base"
    asset_class: AssetClass = AssetClass.OTHER
    platform: str = ""
    source: str = ""

    def __init__(
        self,
        cache: PriceCache | None = None,
        transport: HttpTransport | None = None,
        clock: Callable[[], datetime] = utc_now,
        currency: str = "PHP",
        asset_class: AssetClass | None = None,
    ) -> None:
        self.clock = clock
        self.currency = currency.upper()
        if asset_class is not None:
            self.asset_class = AssetClass.parse(asset_class)
        self.cache = cache if cache is not None else MemoryPriceCache(clock=clock)
        # an injected transport belongs to the caller
        self._owns_transport = transport is None
        self.transport = transport if transport is not None else HttpTransport()
        self.flight: SingleFlight[FetchResult] = SingleFlight()

    # --- Public API ---

    def fetch_price(self, ticker: str) -> PriceRecord | None:
        """Current price for ``ticker``, or None if it could not be had."""
        return self.fetch_result(ticker).record

    def fetch_result(self, ticker: str) -> FetchResult:
        """Like ``fetch_price`` but keeps the failure reason."""
        key = normalize_ticker(ticker)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("%s cache hit for %s", self.name, key)
            return FetchResult.success(cached)

        try:
            return self.flight.do(key, lambda: self._produce(key))
        except Exception as exc:
            # only reachable when a joiner gives up waiting on the leader
            logger.warning("%s fetch for %s abandoned: %s", self.name, key, exc)
            return FetchResult.failed(PriceErrorCode.TIMEOUT, str(exc))

    def clear_cache(self, ticker: str | None = None) -> None:
        if ticker is None:
            self.cache.clear_all()
        else:
            self.cache.clear(ticker)

    def close(self) -> None:
        """Release the HTTP session if this provider created it."""
        if self._owns_transport:
            self.transport.close()

    def __enter__(self) -> BasePriceProvider:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # --- Subclass hook ---

    @abstractmethod
    def _fetch_uncached(self, ticker: str) -> FetchResult:
        """Fetch ``ticker`` from the provider, bypassing the cache.

        Args:
            ticker: Normalized ticker symbol.
        """
        ...

    def _record(self, ticker: str, price: Decimal) -> PriceRecord:
        return PriceRecord(
            platform=self.platform,
            ticker=ticker,
            price=price,
            currency=self.currency,
            source=self.source,
            retrieved_at=self.clock(),
        )

    # --- Internals ---

    def _produce(self, key: str) -> FetchResult:
        # a fetch that settled between our cache miss and taking the
        # in-flight slot has already populated the cache
        cached = self.cache.get(key)
        if cached is not None:
            return FetchResult.success(cached)

        try:
            result = self._fetch_uncached(key)
        except PriceError as exc:
            result = FetchResult.failed(exc.code, str(exc))
        except Exception as exc:
            logger.exception("%s fetch for %s crashed", self.name, key)
            result = FetchResult.failed(PriceErrorCode.TRANSPORT_ERROR, str(exc))

        if result.record is not None:
            self.cache.put(key, result.record)
            logger.debug("%s priced %s at %s", self.name, key, result.record.price)
        elif result.error is PriceErrorCode.RATE_LIMITED:
            logger.warning("%s rate limited while fetching %s", self.name, key)
        else:
            code = result.error.value if result.error else "unknown"
            logger.warning("%s could not price %s (%s): %s", self.name, key, code, result.detail)
        return result

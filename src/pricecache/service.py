"""PriceService — routes an asset to the provider for its class."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Iterable, Mapping, Union

from pricecache.cache import MemoryPriceCache, NoCache, PriceCache
from pricecache.config import AssetClass, PriceServiceConfig
from pricecache.errors import PriceError, PriceErrorCode
from pricecache.models.asset import AssetDescriptor
from pricecache.models.price import PriceRecord, utc_now
from pricecache.providers import create_provider
from pricecache.providers.base import BasePriceProvider
from pricecache.transport import HttpTransport

logger = logging.getLogger(__name__)

AssetLike = Union[AssetDescriptor, tuple[str, Union[AssetClass, str]]]


class PriceService:
    """Dispatcher: asset class -> provider -> PriceRecord or None.

    The service keeps no cache of its own; each provider has its own cache
    and in-flight registry, so an equity and a coin sharing a ticker never
    collide.

    Usage::

        from pricecache import AssetClass, AssetDescriptor, PriceService
        svc = PriceService()
        record = svc.get_price(AssetDescriptor("BTC", AssetClass.CRYPTOCURRENCY))
    """

    def __init__(
        self,
        config: PriceServiceConfig | None = None,
        *,
        providers: Mapping[AssetClass, BasePriceProvider] | None = None,
        transport: HttpTransport | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.config = config or PriceServiceConfig()
        self.clock = clock
        self.transport = transport or HttpTransport(
            relay_url=self.config.relay_url,
            timeout=self.config.request_timeout,
            user_agent=self.config.user_agent,
        )

        # Build provider per routed class
        self.providers: dict[AssetClass, BasePriceProvider] = {}
        if providers is not None:
            self.providers.update(providers)
        else:
            routes = {
                AssetClass.EQUITY: self.config.equity_provider,
                AssetClass.CRYPTOCURRENCY: self.config.crypto_provider,
            }
            for asset_class, name in routes.items():
                self.providers[asset_class] = create_provider(
                    name,
                    cache=self._build_cache(),
                    transport=self.transport,
                    clock=clock,
                    currency=self.config.target_currency,
                    asset_class=asset_class,
                )

    # ---------------------------------------------------------------- prices

    def get_price(self, asset: AssetLike) -> PriceRecord | None:
        """Price one asset. Returns None when it cannot be priced."""
        descriptor = self._descriptor(asset)
        provider = self.providers.get(descriptor.asset_class)
        if descriptor.asset_class is AssetClass.OTHER or provider is None:
            return None
        return provider.fetch_price(descriptor.ticker)

    def get_prices(self, assets: Iterable[AssetLike]) -> dict[str, PriceRecord]:
        """Price many assets concurrently.

        Returns ticker -> record for the assets that could be priced;
        unpriced tickers are left out. Malformed entries (blank or
        non-string tickers) are logged and skipped.
        """
        parsed = []
        for asset in assets:
            try:
                parsed.append(self._descriptor(asset))
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping unpriceable asset %r: %s", asset, exc)
        descriptors = list(dict.fromkeys(parsed))
        if not descriptors:
            return {}

        workers = max(1, min(self.config.max_workers, len(descriptors)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pricecache") as pool:
            records = list(pool.map(self.get_price, descriptors))

        prices: dict[str, PriceRecord] = {}
        for descriptor, record in zip(descriptors, records):
            if record is not None:
                prices[descriptor.ticker] = record
        logger.info("Priced %d of %d assets", len(prices), len(descriptors))
        return prices

    # --------------------------------------------------------------- cache

    def clear_cache(self, asset_class: AssetClass | None = None) -> None:
        for cls, provider in self.providers.items():
            if asset_class is None or cls is asset_class:
                provider.clear_cache()

    # ------------------------------------------------------------ lifecycle

    def close(self) -> None:
        for provider in self.providers.values():
            provider.close()
        self.transport.close()

    def __enter__(self) -> PriceService:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ------------------------------------------------------------ internal

    def _build_cache(self) -> PriceCache:
        if self.config.cache_backend == "memory":
            return MemoryPriceCache(ttl_seconds=self.config.cache_ttl_seconds, clock=self.clock)
        if self.config.cache_backend == "none":
            return NoCache()
        raise PriceError(
            f"Unknown cache backend {self.config.cache_backend!r}",
            code=PriceErrorCode.NOT_FOUND,
        )

    @staticmethod
    def _descriptor(asset: AssetLike) -> AssetDescriptor:
        if isinstance(asset, AssetDescriptor):
            return asset
        ticker, asset_class = asset
        return AssetDescriptor(ticker, AssetClass.parse(asset_class))

"""pricecache — cached, deduplicated current prices for equities and crypto.

Routes each asset to a provider by its declared class (PSE Edge for
equities, CoinGecko for cryptocurrencies), caches prices for a short TTL,
coalesces concurrent requests for the same ticker, and reports failures
as a missing price rather than an exception.

Quick start::

    from pricecache import AssetClass, AssetDescriptor, create_service_from_env
    svc = create_service_from_env()
    record = svc.get_price(AssetDescriptor("BTC", AssetClass.CRYPTOCURRENCY))
"""

from __future__ import annotations

import os

from pricecache.cache import MemoryPriceCache, NoCache, PriceCache
from pricecache.config import AssetClass, PriceServiceConfig
from pricecache.errors import PriceError, PriceErrorCode
from pricecache.extraction import ExtractionStrategy, LabeledFieldExtractor, parse_price
from pricecache.frames import records_to_frame
from pricecache.models.asset import AssetDescriptor, normalize_ticker
from pricecache.models.price import PriceRecord
from pricecache.models.result import FetchResult
from pricecache.providers import PROVIDER_CLASSES, create_provider
from pricecache.providers.base import BasePriceProvider
from pricecache.resolver import IdentifierResolver, IdentifierStore, MemoryIdentifierStore
from pricecache.service import PriceService
from pricecache.singleflight import SingleFlight
from pricecache.transport import HttpTransport

__version__ = "0.1.0"

__all__ = [
    # Service
    "PriceService",
    "create_service_from_env",
    # Config
    "PriceServiceConfig",
    "AssetClass",
    # Errors
    "PriceError",
    "PriceErrorCode",
    # Models
    "AssetDescriptor",
    "PriceRecord",
    "FetchResult",
    "normalize_ticker",
    # Building blocks
    "PriceCache",
    "MemoryPriceCache",
    "NoCache",
    "SingleFlight",
    "IdentifierStore",
    "MemoryIdentifierStore",
    "IdentifierResolver",
    "ExtractionStrategy",
    "LabeledFieldExtractor",
    "parse_price",
    "HttpTransport",
    # Providers
    "BasePriceProvider",
    "PROVIDER_CLASSES",
    "create_provider",
    # DataFrame helpers
    "records_to_frame",
]


def create_service_from_env() -> PriceService:
    """Zero-config factory — reads service settings from env vars.

    Environment variables:
        PRICE_EQUITY_PROVIDER: Equity provider name (default: "pse").
        PRICE_CRYPTO_PROVIDER: Crypto provider name (default: "coingecko").
        PRICE_TARGET_CURRENCY: Quote currency (default: "PHP").
        PRICE_CACHE: Cache backend — "memory" or "none" (default: "memory").
        PRICE_CACHE_TTL: Cache TTL in seconds (default: 60).
        PRICE_RELAY_URL: Relay prefix for document fetches
            (default: "https://corsproxy.io/?").
        PRICE_HTTP_TIMEOUT: HTTP timeout in seconds, "none" to disable
            (default: 15).
        PRICE_MAX_WORKERS: Batch refresh thread count (default: 8).
    """
    timeout_str = os.getenv("PRICE_HTTP_TIMEOUT", "15").strip().lower()

    config = PriceServiceConfig(
        equity_provider=os.getenv("PRICE_EQUITY_PROVIDER", "pse"),
        crypto_provider=os.getenv("PRICE_CRYPTO_PROVIDER", "coingecko"),
        target_currency=os.getenv("PRICE_TARGET_CURRENCY", "PHP"),
        cache_backend=os.getenv("PRICE_CACHE", "memory"),
        cache_ttl_seconds=float(os.getenv("PRICE_CACHE_TTL", "60")),
        relay_url=os.getenv("PRICE_RELAY_URL", PriceServiceConfig.relay_url),
        request_timeout=None if timeout_str == "none" else float(timeout_str),
        max_workers=int(os.getenv("PRICE_MAX_WORKERS", "8")),
    )

    return PriceService(config)

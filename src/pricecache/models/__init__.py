"""Price data models."""

from pricecache.models.asset import AssetDescriptor, normalize_ticker
from pricecache.models.price import PriceRecord, utc_now
from pricecache.models.result import FetchResult

__all__ = [
    "AssetDescriptor",
    "PriceRecord",
    "FetchResult",
    "normalize_ticker",
    "utc_now",
]

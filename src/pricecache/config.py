"""Price service configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AssetClass(Enum):
    """Declared asset class; decides which provider prices an asset."""

    EQUITY = "equity"
    CRYPTOCURRENCY = "crypto"
    OTHER = "other"

    @classmethod
    def parse(cls, value: AssetClass | str | None) -> AssetClass:
        """Coerce a class, its value, or a portfolio label into an AssetClass.

        Portfolio labels ("Stock", "Crypto", "Cash", ...) are accepted as
        well. Anything unrecognised is ``OTHER``.
        """
        if isinstance(value, AssetClass):
            return value
        if value is None:
            return cls.OTHER
        key = str(value).strip().lower()
        return _ASSET_CLASS_ALIASES.get(key, cls.OTHER)


_ASSET_CLASS_ALIASES: dict[str, AssetClass] = {
    "equity": AssetClass.EQUITY,
    "stock": AssetClass.EQUITY,
    "crypto": AssetClass.CRYPTOCURRENCY,
    "cryptocurrency": AssetClass.CRYPTOCURRENCY,
    "other": AssetClass.OTHER,
}


DEFAULT_RELAY_URL = "https://corsproxy.io/?"
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; pricecache/0.1)"


@dataclass
class PriceServiceConfig:
    """Configuration for PriceService.

    Attributes:
        equity_provider: Registered provider name used for equities.
        crypto_provider: Registered provider name used for cryptocurrencies.
        target_currency: Currency code prices are quoted in.
        cache_backend: Cache type, "memory" or "none".
        cache_ttl_seconds: Freshness window for cached prices.
        relay_url: Prefix of the relay used for cross-origin document fetches.
        request_timeout: HTTP timeout in seconds; ``None`` waits forever.
        max_workers: Thread pool size for batch refreshes.
        user_agent: User-Agent header sent with every request.
    """

    equity_provider: str = "pse"
    crypto_provider: str = "coingecko"
    target_currency: str = "PHP"
    cache_backend: str = "memory"
    cache_ttl_seconds: float = 60
    relay_url: str = DEFAULT_RELAY_URL
    request_timeout: float | None = 15.0
    max_workers: int = 8
    user_agent: str = DEFAULT_USER_AGENT

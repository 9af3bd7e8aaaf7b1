"""CoinGecko cryptocurrency provider.

Queries ``/coins/markets`` with the ticker as the ``symbols`` filter, so no
symbol -> coin id resolution step is needed.
"""

from __future__ import annotations

from typing import Any

from pricecache.config import AssetClass
from pricecache.errors import PriceErrorCode
from pricecache.extraction import parse_price
from pricecache.models.result import FetchResult
from pricecache.providers.base import BasePriceProvider

COINGECKO_URL = "https://api.coingecko.com/api/v3"


class CoinGeckoProvider(BasePriceProvider):
    """Crypto prices from CoinGecko's public markets endpoint.

    Capabilities: spot price in any ``vs_currency`` CoinGecko supports.
    """

    name = "coingecko"
    asset_class = AssetClass.CRYPTOCURRENCY
    platform = "Crypto Exchange"
    source = "CoinGecko Markets"

    def __init__(self, *args: Any, base_url: str = COINGECKO_URL, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.base_url = base_url

    def _fetch_uncached(self, ticker: str) -> FetchResult:
        data = self.transport.get_json(
            f"{self.base_url}/coins/markets",
            {"vs_currency": self.currency.lower(), "symbols": ticker.lower()},
        )

        if not isinstance(data, list) or not data:
            return FetchResult.failed(
                PriceErrorCode.NO_DATA, f"no market data for {ticker}",
            )

        market = next(
            (
                c for c in data
                if isinstance(c, dict) and str(c.get("symbol", "")).upper() == ticker
            ),
            data[0],
        )
        raw = market.get("current_price") if isinstance(market, dict) else None
        if raw is None:
            return FetchResult.failed(
                PriceErrorCode.NO_DATA, f"no current price for {ticker}",
            )

        price = parse_price(str(raw))
        if price is None:
            return FetchResult.failed(
                PriceErrorCode.EXTRACTION_FAILED, f"unparsable price {raw!r} for {ticker}",
            )
        return FetchResult.success(self._record(ticker, price))

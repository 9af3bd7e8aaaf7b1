"""PSE Edge equity provider — scrapes the company stock-data page.

Two requests per uncached ticker, both relayed and cache-busted:

1. symbol search, to turn the ticker into PSE Edge's company id (cached
   for the life of the process);
2. the company's stock-data page, from which the "Last Traded Price"
   cell is read.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

from pricecache.cache import PriceCache
from pricecache.config import AssetClass
from pricecache.errors import PriceErrorCode
from pricecache.extraction import ExtractionStrategy, LabeledFieldExtractor, parse_price
from pricecache.models.price import utc_now
from pricecache.models.result import FetchResult
from pricecache.providers.base import BasePriceProvider
from pricecache.resolver import IdentifierResolver, IdentifierStore
from pricecache.transport import HttpTransport

PSE_EDGE_URL = "https://edge.pse.com.ph"
_SEARCH_PATH = "/autoComplete/searchCompanyNameSymbol.ax"
_STOCK_DATA_PATH = "/companyPage/stockData.do"


class PseEdgeProvider(BasePriceProvider):
    """Philippine Stock Exchange equities via PSE Edge.

    Args:
        cache: Price cache; defaults to a 60 second memory cache.
        transport: Shared HTTP transport.
        clock: Source of retrieval timestamps.
        currency: Ignored beyond labelling; PSE quotes in PHP.
        identifiers: Store for resolved company ids.
        extractor: How the price cell is found in the page.
        base_url: Override for PSE Edge (testing).
    """

    name = "pse"
    asset_class = AssetClass.EQUITY
    platform = "COL Financial"
    source = "PSE Edge"

    def __init__(
        self,
        cache: PriceCache | None = None,
        transport: HttpTransport | None = None,
        clock: Callable[[], datetime] = utc_now,
        currency: str = "PHP",
        identifiers: IdentifierStore | None = None,
        extractor: ExtractionStrategy | None = None,
        base_url: str = PSE_EDGE_URL,
        asset_class: AssetClass | None = None,
    ) -> None:
        super().__init__(
            cache=cache, transport=transport, clock=clock, currency="PHP", asset_class=asset_class,
        )
        self.base_url = base_url
        self.extractor = extractor or LabeledFieldExtractor("Last Traded Price")
        self.resolver = IdentifierResolver(
            self._search, store=identifiers, symbol_field="symbol", id_field="cmpyId",
        )

    def _fetch_uncached(self, ticker: str) -> FetchResult:
        company_id = self.resolver.resolve(ticker)
        if company_id is None:
            return FetchResult.failed(
                PriceErrorCode.RESOLUTION_FAILED, f"no PSE Edge company id for {ticker}",
            )

        document = self.transport.get_text(
            f"{self.base_url}{_STOCK_DATA_PATH}",
            {"cmpy_id": company_id},
            relay=True,
            bust_cache=True,
        )

        text = self.extractor.extract(document)
        if text is None:
            return FetchResult.failed(
                PriceErrorCode.EXTRACTION_FAILED, f"price field missing for {ticker}",
            )

        price = parse_price(text)
        if price is None:
            return FetchResult.failed(
                PriceErrorCode.EXTRACTION_FAILED, f"unparsable price {text!r} for {ticker}",
            )
        return FetchResult.success(self._record(ticker, price))

    def _search(self, ticker: str) -> Any:
        return self.transport.get_json(
            f"{self.base_url}{_SEARCH_PATH}",
            {"term": ticker},
            relay=True,
            bust_cache=True,
        )

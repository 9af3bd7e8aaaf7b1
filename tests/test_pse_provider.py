"""Tests for the PSE Edge equity provider."""

import threading
import time
from decimal import Decimal

from pricecache.cache import MemoryPriceCache
from pricecache.config import AssetClass
from pricecache.errors import PriceError, PriceErrorCode
from pricecache.extraction import ExtractionStrategy
from pricecache.providers.pse import PseEdgeProvider
from pricecache.resolver import MemoryIdentifierStore

from conftest import PSE_PAGE, PSE_PAGE_NO_LABEL, PSE_SEARCH, FakeTransport


def _provider(transport, clock, **kwargs):
    return PseEdgeProvider(
        cache=MemoryPriceCache(ttl_seconds=60, clock=clock),
        transport=transport,
        clock=clock,
        **kwargs,
    )


class TestPseEdgeProvider:
    def test_attributes(self, pse_transport, clock):
        provider = _provider(pse_transport, clock)
        assert provider.name == "pse"
        assert provider.asset_class is AssetClass.EQUITY

    def test_fetch_price(self, pse_transport, clock):
        record = _provider(pse_transport, clock).fetch_price("ac")
        assert record is not None
        assert record.ticker == "AC"
        assert record.price == Decimal("1234.50")
        assert record.currency == "PHP"
        assert record.platform == "COL Financial"
        assert record.source == "PSE Edge"
        assert record.retrieved_at == clock()

    def test_requests_are_relayed_and_cache_busted(self, pse_transport, clock):
        _provider(pse_transport, clock).fetch_price("AC")
        search, page = pse_transport.requests
        assert search[0] == "json" and "searchCompanyNameSymbol" in search[1]
        assert search[2] == {"term": "AC"}
        assert page[0] == "text" and "stockData.do" in page[1]
        assert page[2] == {"cmpy_id": "57"}
        assert all(relay and bust for *_, relay, bust in pse_transport.requests)

    def test_cache_hit_within_ttl(self, pse_transport, clock):
        provider = _provider(pse_transport, clock)
        first = provider.fetch_price("AC")
        clock.advance(30)
        pse_transport.text_routes["stockData.do"] = PriceError("offline")
        assert provider.fetch_price("ac") is first
        assert pse_transport.count("text") == 1

    def test_refetch_after_ttl_reuses_identifier(self, pse_transport, clock):
        provider = _provider(pse_transport, clock)
        provider.fetch_price("AC")
        clock.advance(60)
        record = provider.fetch_price("AC")
        assert record is not None
        assert record.retrieved_at == clock()
        assert pse_transport.count("text") == 2
        assert pse_transport.count("json") == 1

    def test_shared_identifier_store(self, pse_transport, clock):
        store = MemoryIdentifierStore()
        store.put("AC", "999")
        _provider(pse_transport, clock, identifiers=store).fetch_price("AC")
        assert pse_transport.count("json") == 0
        assert pse_transport.requests[0][2] == {"cmpy_id": "999"}

    def test_unknown_ticker(self, pse_transport, clock):
        result = _provider(pse_transport, clock).fetch_result("ZZZ")
        assert result.record is None
        assert result.error is PriceErrorCode.RESOLUTION_FAILED
        assert pse_transport.count("text") == 0

    def test_missing_label_then_recovers(self, clock):
        transport = FakeTransport(
            json_routes={"searchCompanyNameSymbol": PSE_SEARCH},
            text_routes={"stockData.do": PSE_PAGE_NO_LABEL},
        )
        provider = _provider(transport, clock)
        result = provider.fetch_result("AC")
        assert result.error is PriceErrorCode.EXTRACTION_FAILED

        clock.advance(120)
        transport.text_routes["stockData.do"] = PSE_PAGE
        record = provider.fetch_price("AC")
        assert record is not None
        assert record.price == Decimal("1234.50")

    def test_empty_value_is_absent_not_zero(self, clock):
        transport = FakeTransport(
            json_routes={"searchCompanyNameSymbol": PSE_SEARCH},
            text_routes={"stockData.do": "<table><tr><th>Last Traded Price</th><td></td></tr></table>"},
        )
        provider = _provider(transport, clock)
        assert provider.fetch_price("AC") is None
        assert len(provider.cache) == 0

    def test_unparsable_price(self, clock):
        transport = FakeTransport(
            json_routes={"searchCompanyNameSymbol": PSE_SEARCH},
            text_routes={"stockData.do": "<table><tr><th>Last Traded Price</th><td>n/a</td></tr></table>"},
        )
        result = _provider(transport, clock).fetch_result("AC")
        assert result.error is PriceErrorCode.EXTRACTION_FAILED

    def test_transport_failure_is_absent(self, clock):
        transport = FakeTransport(
            json_routes={"searchCompanyNameSymbol": PSE_SEARCH},
            text_routes={"stockData.do": PriceError("429", code=PriceErrorCode.RATE_LIMITED)},
        )
        result = _provider(transport, clock).fetch_result("AC")
        assert result.error is PriceErrorCode.RATE_LIMITED

    def test_unexpected_exception_is_absent(self, clock):
        transport = FakeTransport(
            json_routes={"searchCompanyNameSymbol": PSE_SEARCH},
            text_routes={"stockData.do": KeyError("surprise")},
        )
        provider = _provider(transport, clock)
        assert provider.fetch_price("AC") is None
        assert len(provider.flight) == 0

    def test_custom_extractor(self, pse_transport, clock):
        class Fixed(ExtractionStrategy):
            def extract(self, document):
                return "7.77"

        record = _provider(pse_transport, clock, extractor=Fixed()).fetch_price("AC")
        assert record.price == Decimal("7.77")

    def test_ten_simultaneous_fetches_one_document_request(self, pse_transport, clock):
        gate = threading.Event()
        pse_transport.gate = gate
        provider = _provider(pse_transport, clock)

        results = []
        threads = [
            threading.Thread(target=lambda: results.append(provider.fetch_price("AC")))
            for _ in range(10)
        ]
        for t in threads:
            t.start()
        time.sleep(0.05)
        gate.set()
        for t in threads:
            t.join(timeout=5)

        assert len(results) == 10
        assert all(r is results[0] and r is not None for r in results)
        assert pse_transport.count("text", "stockData.do") == 1
        assert pse_transport.count("json") == 1

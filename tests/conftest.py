"""Shared fixtures for pricecache tests."""

from __future__ import annotations

import sys
import threading
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

# Ensure src/ is on the path for editable-style imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from pricecache.models.price import PriceRecord
from pricecache.providers.mock import MockProvider


class FakeClock:
    """Settable clock; call it to read the current time."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeTransport:
    """Stands in for HttpTransport.

    Responses are looked up by the first route whose key is a substring of
    the requested URL. A route value that is an exception instance is
    raised instead of returned. ``gate`` holds every request open until
    set.
    """

    def __init__(
        self,
        json_routes: dict[str, Any] | None = None,
        text_routes: dict[str, Any] | None = None,
        gate: threading.Event | None = None,
    ) -> None:
        self.json_routes = json_routes or {}
        self.text_routes = text_routes or {}
        self.gate = gate
        self.requests: list[tuple[str, str, dict[str, Any], bool, bool]] = []
        self._lock = threading.Lock()

    def get_json(self, url, params=None, *, relay=False, bust_cache=False):
        return self._serve("json", self.json_routes, url, params, relay, bust_cache)

    def get_text(self, url, params=None, *, relay=False, bust_cache=False):
        return self._serve("text", self.text_routes, url, params, relay, bust_cache)

    def count(self, kind: str, fragment: str = "") -> int:
        with self._lock:
            return sum(1 for k, u, *_ in self.requests if k == kind and fragment in u)

    def close(self) -> None:
        pass

    def _serve(self, kind, routes, url, params, relay, bust_cache):
        with self._lock:
            self.requests.append((kind, url, dict(params or {}), relay, bust_cache))
        if self.gate is not None:
            self.gate.wait(timeout=5)
        for fragment, response in routes.items():
            if fragment in url:
                if isinstance(response, BaseException):
                    raise response
                return response
        raise AssertionError(f"unexpected {kind} request to {url}")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def mock_provider(clock) -> MockProvider:
    return MockProvider(clock=clock, transport=FakeTransport())


@pytest.fixture
def sample_record(clock) -> PriceRecord:
    return PriceRecord(
        platform="COL Financial",
        ticker="AC",
        price=Decimal("1234.50"),
        currency="PHP",
        source="PSE Edge",
        retrieved_at=clock(),
    )


PSE_SEARCH = [
    {"cmpyId": "57", "symbol": "AC", "cmpyNm": "Ayala Corporation"},
    {"cmpyId": "58", "symbol": "ACEN", "cmpyNm": "ACEN Corporation"},
]

PSE_PAGE = """
<html><body>
<table class="view">
  <tr><th>Status</th><td>OPEN</td></tr>
  <tr><th>Last Traded Price</th><td> 1,234.50 </td></tr>
  <tr><th>Open</th><td>1,220.00</td></tr>
</table>
</body></html>
"""

PSE_PAGE_NO_LABEL = "<html><body><table><tr><th>Open</th><td>1.00</td></tr></table></body></html>"


@pytest.fixture
def pse_transport() -> FakeTransport:
    return FakeTransport(
        json_routes={"searchCompanyNameSymbol": PSE_SEARCH},
        text_routes={"stockData.do": PSE_PAGE},
    )


@pytest.fixture
def coingecko_transport() -> FakeTransport:
    return FakeTransport(
        json_routes={
            "coins/markets": [
                {"id": "bitcoin", "symbol": "btc", "current_price": 3456789.12},
            ],
        },
    )

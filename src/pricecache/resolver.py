"""Ticker -> provider-internal identifier resolution."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable

from pricecache.errors import PriceError
from pricecache.models.asset import normalize_ticker

logger = logging.getLogger(__name__)


class IdentifierStore(ABC):
    """Where resolved identifiers are kept."""

    @abstractmethod
    def get(self, ticker: str) -> str | None:
        ...

    @abstractmethod
    def put(self, ticker: str, identifier: str) -> None:
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...

    def __contains__(self, ticker: object) -> bool:
        return isinstance(ticker, str) and self.get(ticker) is not None


class MemoryIdentifierStore(IdentifierStore):
    """Process-lifetime mapping. Identifiers are assumed stable, so entries
    never expire."""

    def __init__(self) -> None:
        self._ids: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, ticker: str) -> str | None:
        with self._lock:
            return self._ids.get(normalize_ticker(ticker))

    def put(self, ticker: str, identifier: str) -> None:
        with self._lock:
            self._ids[normalize_ticker(ticker)] = identifier

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)


class IdentifierResolver:
    """Resolves a ticker through a provider's symbol search, once.

    ``search`` takes the normalized ticker and returns the provider's
    candidate list. A candidate matches when its ``symbol_field``
    equals the ticker ignoring case and surrounding whitespace. Only
    positive results are stored, so a failed lookup is retried on the next
    call.
    """

    def __init__(
        self,
        search: Callable[[str], Any],
        store: IdentifierStore | None = None,
        symbol_field: str = "symbol",
        id_field: str = "cmpyId",
    ) -> None:
        self._search = search
        self.store = store if store is not None else MemoryIdentifierStore()
        self.symbol_field = symbol_field
        self.id_field = id_field

    def resolve(self, ticker: str) -> str | None:
        key = normalize_ticker(ticker)
        cached = self.store.get(key)
        if cached is not None:
            return cached

        try:
            candidates = self._search(key)
        except PriceError as exc:
            logger.warning("Identifier lookup for %s failed (%s): %s", key, exc.code.value, exc)
            return None

        identifier = self._match(key, candidates)
        if identifier is None:
            logger.info("No identifier match for %s", key)
            return None

        self.store.put(key, identifier)
        return identifier

    def _match(self, key: str, candidates: Any) -> str | None:
        if not isinstance(candidates, list):
            return None
        for item in candidates:
            if not isinstance(item, dict):
                continue
            symbol = item.get(self.symbol_field)
            if not isinstance(symbol, str) or symbol.strip().upper() != key:
                continue
            identifier = item.get(self.id_field)
            if identifier in (None, ""):
                continue
            return str(identifier)
        return None

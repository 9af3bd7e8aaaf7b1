"""FetchResult: a price record or the reason there isn't one."""

from __future__ import annotations

from dataclasses import dataclass

from pricecache.errors import PriceErrorCode
from pricecache.models.price import PriceRecord


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a single provider fetch.

    Exactly one of ``record`` and ``error`` is set.
    """

    record: PriceRecord | None = None
    error: PriceErrorCode | None = None
    detail: str = ""

    @classmethod
    def success(cls, record: PriceRecord) -> FetchResult:
        return cls(record=record)

    @classmethod
    def failed(cls, code: PriceErrorCode, detail: str = "") -> FetchResult:
        return cls(error=code, detail=detail)

    @property
    def ok(self) -> bool:
        return self.record is not None

"""PriceRecord data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from pricecache.models.asset import normalize_ticker


def utc_now() -> datetime:
    """Default clock for retrieval timestamps and freshness checks."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PriceRecord:
    """A current price for one ticker from one provider.

    Attributes:
        platform: Label of the platform the asset trades on.
        ticker: Normalized ticker symbol.
        price: Price in ``currency``. Always a finite Decimal.
        currency: Currency code of ``price``.
        source: Label of the data provider.
        retrieved_at: When the price was fetched (timezone-aware).
    """

    platform: str
    ticker: str
    price: Decimal
    currency: str
    source: str
    retrieved_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "ticker", normalize_ticker(self.ticker))
        object.__setattr__(self, "price", _coerce_price(self.price))
        if self.retrieved_at.tzinfo is None:
            object.__setattr__(
                self, "retrieved_at", self.retrieved_at.replace(tzinfo=timezone.utc),
            )

    def age(self, now: datetime | None = None) -> timedelta:
        """Time elapsed since retrieval."""
        return (now or utc_now()) - self.retrieved_at

    def as_dict(self) -> dict[str, Any]:
        """JSON-friendly representation."""
        return {
            "platform": self.platform,
            "asset": self.ticker,
            "price": str(self.price),
            "currency": self.currency,
            "source": self.source,
            "retrieved_at": self.retrieved_at.isoformat(),
        }


def _coerce_price(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValueError(f"price must be a number, got {value!r}")
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"price must be a number, got {value!r}") from exc
    if not price.is_finite():
        raise ValueError(f"price must be finite, got {value!r}")
    return price

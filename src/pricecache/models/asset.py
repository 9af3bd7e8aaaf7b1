"""Asset descriptor and ticker normalization."""

from __future__ import annotations

from dataclasses import dataclass

from pricecache.config import AssetClass


def normalize_ticker(ticker: str) -> str:
    """Canonical key form of a ticker: stripped and upper-cased.

    Every cache, in-flight and identifier lookup goes through this.
    """
    if not isinstance(ticker, str):
        raise ValueError(f"ticker must be a string, got {ticker!r}")
    key = ticker.strip().upper()
    if not key:
        raise ValueError("ticker must not be empty")
    return key


@dataclass(frozen=True)
class AssetDescriptor:
    """An asset to be priced.

    Attributes:
        ticker: Ticker symbol, normalized on construction.
        asset_class: Declared class; decides routing.
    """

    ticker: str
    asset_class: AssetClass = AssetClass.OTHER

    def __post_init__(self) -> None:
        object.__setattr__(self, "ticker", normalize_ticker(self.ticker))
        object.__setattr__(self, "asset_class", AssetClass.parse(self.asset_class))

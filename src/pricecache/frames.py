"""DataFrame view of a batch of prices, for valuation and reporting code."""

from __future__ import annotations

from typing import Iterable, Mapping

import pandas as pd

from pricecache.models.price import PriceRecord

FRAME_COLUMNS = ["ticker", "price", "currency", "platform", "source", "retrieved_at"]


def records_to_frame(
    records: Mapping[str, PriceRecord] | Iterable[PriceRecord],
) -> pd.DataFrame:
    """One row per record, indexed by ticker and sorted.

    ``price`` is a float column and ``retrieved_at`` a UTC timestamp
    column. An empty input gives an empty frame with the same columns.
    """
    if isinstance(records, Mapping):
        records = records.values()

    rows = [
        {
            "ticker": r.ticker,
            "price": float(r.price),
            "currency": r.currency,
            "platform": r.platform,
            "source": r.source,
            "retrieved_at": r.retrieved_at,
        }
        for r in records
    ]
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    df["price"] = df["price"].astype(float)
    df["retrieved_at"] = pd.to_datetime(df["retrieved_at"], utc=True)
    return df.set_index("ticker").sort_index()

"""Pulling a price out of a fetched HTML document."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation

from bs4 import BeautifulSoup

_THOUSANDS_RE = re.compile(r"[,\s]")


class ExtractionStrategy(ABC):
    """Finds the raw price text inside a document."""

    @abstractmethod
    def extract(self, document: str) -> str | None:
        """Return the price text, or None if the document lacks it."""
        ...


class LabeledFieldExtractor(ExtractionStrategy):
    """Reads the value cell next to a label cell, e.g. ``<th>Last Traded
    Price</th><td>1,234.50</td>``.

    The label must match exactly after whitespace stripping. An empty value
    cell counts as missing.
    """

    def __init__(
        self,
        label: str = "Last Traded Price",
        label_tag: str = "th",
        value_tag: str = "td",
    ) -> None:
        self.label = label
        self.label_tag = label_tag
        self.value_tag = value_tag

    def extract(self, document: str) -> str | None:
        soup = BeautifulSoup(document, "html.parser")
        for cell in soup.find_all(self.label_tag):
            if cell.get_text(strip=True) != self.label:
                continue
            value = cell.find_next_sibling(self.value_tag)
            if value is None:
                continue
            return value.get_text(strip=True) or None
        return None


def parse_price(text: str | None) -> Decimal | None:
    """Parse ``"1,234.50"`` into ``Decimal("1234.50")``.

    Returns None for empty, unparsable, NaN or infinite input.
    """
    if text is None:
        return None
    cleaned = _THOUSANDS_RE.sub("", text)
    if not cleaned:
        return None
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value

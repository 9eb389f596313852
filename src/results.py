from decimal import Decimal
from typing import NamedTuple


class ScrapeResult(NamedTuple):
    item_key: str
    candidates: int
    saved_listings: int
    average: Decimal | None
    deals: int


class ScrapeOutcome(NamedTuple):
    """What happened to one item in a batch scrape."""

    item_key: str
    result: ScrapeResult | None
    error: str | None

    @property
    def success(self) -> bool:
        return self.error is None

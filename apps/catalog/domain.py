"""
Catalog snapshots

Immutable views of catalog rows. The availability and pricing logic only
ever sees these, so it can be exercised against deterministic catalog
states without a database.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class CatalogEntry:
    instrument_id: int | None
    slug: str
    total_quantity: int
    price_per_day: Decimal = Decimal("0")
    name: str = ""
    condition_status: str = "good"
    is_archived: bool = False

    def __post_init__(self):
        if self.total_quantity < 0:
            raise ValueError("total_quantity cannot be negative")
        if self.price_per_day < 0:
            raise ValueError("price_per_day cannot be negative")

    @property
    def is_reservable(self) -> bool:
        return not self.is_archived and self.condition_status != UNAVAILABLE


"""
Instrument Inventory

The consistency boundary for instrument stock. Every admission of new
rent/borrow quantity goes through ``InstrumentInventory`` after the
instrument row has been locked, so the invariant

    sum(quantity of capacity-consuming requests overlapping t) <= total

holds for every day t.

The aggregate is pure: it is loaded with a catalog entry and the
allocations that overlap the period of interest, and it never touches the
database itself.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence
import logging

from apps.catalog.domain import CatalogEntry
from shared.domain.errors import Shortfall
from shared.domain.value_objects import DateRange

from .lifecycle import CAPACITY_CONSUMING, PENDING

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Allocation:
    """A ledger row's claim on stock: ``quantity`` units for ``dates``."""
    quantity: int
    dates: DateRange
    status: str = PENDING
    request_id: int | None = None

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError("Allocation quantity must be at least 1")

    @property
    def consumes_capacity(self) -> bool:
        return self.status in CAPACITY_CONSUMING


def available_from(entry: CatalogEntry, committed: int, dates: DateRange | None = None) -> int:
    """
    Stock left once ``committed`` units are taken out.

    A negative result means the ledger already breaks the capacity
    invariant; it is reported as a consistency fault before being floored.
    """
    raw = entry.total_quantity - committed
    if raw < 0:
        logger.error(
            f"Consistency fault: instrument {entry.slug} is over-committed by {-raw} "
            f"unit(s) for {dates if dates else 'the requested period'} "
            f"(total {entry.total_quantity}, committed {committed})"
        )
    if not entry.is_reservable:
        return 0
    return max(raw, 0)


@dataclass
class InstrumentInventory:
    """
    Stock of one instrument over a period

    Usage:
        inventory = load_inventory(instrument, period)   # after locking
        if inventory.can_allocate(dates, quantity):
            inventory.allocate(dates, quantity)
    """

    entry: CatalogEntry = None
    allocations: List[Allocation] = field(default_factory=list)

    def __post_init__(self):
        if self.entry is None:
            raise ValueError("Inventory needs a catalog entry")

    def allocations_for_period(self, dates: DateRange) -> List[Allocation]:
        """Capacity-consuming allocations sharing at least one day with ``dates``."""
        return [
            a for a in self.allocations
            if a.consumes_capacity and a.dates.overlaps_with(dates)
        ]

    def committed_quantity(self, dates: DateRange) -> int:
        return sum(a.quantity for a in self.allocations_for_period(dates))

    def available_quantity(self, dates: DateRange) -> int:
        return available_from(self.entry, self.committed_quantity(dates), dates)

    def can_allocate(self, dates: DateRange, quantity: int) -> bool:
        return quantity <= self.available_quantity(dates)

    def allocate(self, dates: DateRange, quantity: int) -> Allocation:
        """
        Claim stock for a new pending request

        Raises:
            ValueError: If the quantity exceeds what is left for ``dates``
        """
        available = self.available_quantity(dates)
        if quantity > available:
            raise ValueError(
                f"{self.entry.slug}: requested {quantity}, only {available} available for {dates}"
            )
        allocation = Allocation(quantity=quantity, dates=dates, status=PENDING)
        self.allocations.append(allocation)
        return allocation

    def __str__(self):
        return f"Inventory({self.entry.slug}, allocations={len(self.allocations)})"


@dataclass(frozen=True)
class CartLine:
    """One requested item, already resolved to an instrument and dates."""
    index: int
    instrument_id: int
    quantity: int
    dates: DateRange


def admit_cart(inventories: Dict[int, InstrumentInventory], lines: Sequence[CartLine]) -> List[Shortfall]:
    """
    Decide a whole cart against the given inventories.

    Lines are admitted in order and each admitted line is allocated before
    the next is checked, so several lines on one instrument compete for
    the same stock. Returns every line that does not fit; an empty list
    means the cart may be written. Inventories are left with the tentative
    allocations, which the caller discards on refusal.
    """
    shortfalls: List[Shortfall] = []
    for line in lines:
        inventory = inventories[line.instrument_id]
        available = inventory.available_quantity(line.dates)
        if line.quantity > available:
            shortfalls.append(Shortfall(
                index=line.index,
                instrument=inventory.entry.slug,
                requested=line.quantity,
                available=available,
            ))
            continue
        inventory.allocate(line.dates, line.quantity)
    return shortfalls


def covering_range(ranges: Iterable[DateRange]) -> DateRange:
    """Smallest range that contains all of ``ranges``."""
    ranges = list(ranges)
    if not ranges:
        raise ValueError("At least one range is required")
    return DateRange(
        min(r.start_date for r in ranges),
        max(r.end_date for r in ranges),
    )

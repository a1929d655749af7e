"""
Common Value Objects

Value objects used by both reservation contexts:
- Money: Monetary amount with currency
- DateRange: Inclusive range of calendar days (instrument reservations)
- TimeWindow: Same-day start/end time window (ensemble bookings)
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal

from shared.domain.base import ValueObject
from shared.domain.errors import InvalidRange

SUPPORTED_CURRENCIES = ('PHP', 'USD')


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a monetary amount with currency.
    Immutable and supports the arithmetic pricing needs.
    """
    amount: Decimal
    currency: str = 'PHP'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    def __add__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor) -> 'Money':
        if not isinstance(factor, (int, Decimal)):
            raise TypeError("Can only multiply Money by an integer or Decimal")
        return Money(self.amount * Decimal(factor), self.currency)

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Both ends are inclusive: a one-day rental has start_date == end_date.
    A range whose start is after its end is rejected at construction.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date > self.end_date:
            raise InvalidRange(
                f"Start date ({self.start_date}) must not be after end date ({self.end_date})"
            )

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range shares at least one day with another

        Examples:
            - DateRange(1, 5) overlaps with DateRange(5, 9) -> True (day 5 shared)
            - DateRange(1, 5) overlaps with DateRange(6, 9) -> False
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return self.start_date <= other.end_date and self.end_date >= other.start_date

    def __len__(self) -> int:
        """Number of billable days, counting both ends."""
        return (self.end_date - self.start_date).days + 1

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"


@dataclass(frozen=True)
class TimeWindow(ValueObject):
    """
    A performance slot for the ensemble on a single date.

    Windows are half-open: a booking ending at 10:00 and one starting at
    10:00 on the same date do not overlap.
    """
    date: date
    start_time: time
    end_time: time

    def __post_init__(self):
        if self.start_time >= self.end_time:
            raise InvalidRange(
                f"Start time ({self.start_time}) must be before end time ({self.end_time})"
            )

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return datetime.combine(self.date, self.end_time)

    def overlaps_with(self, other: 'TimeWindow') -> bool:
        if not isinstance(other, TimeWindow):
            raise TypeError("Can only check overlap with another TimeWindow")
        return self.starts_at < other.ends_at and other.starts_at < self.ends_at

    def __str__(self):
        return (
            f"{self.date.isoformat()} "
            f"{self.start_time.strftime('%H:%M')}-{self.end_time.strftime('%H:%M')}"
        )

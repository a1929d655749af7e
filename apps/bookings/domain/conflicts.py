"""
Conflict detection

The ensemble is one indivisible resource: it can perform at only one
place at a time. A proposed window conflicts with every blocking booking
whose window overlaps it. The check is pure so it can run over any
snapshot of the ledger; the store-backed variant lives in
``apps.bookings.services``.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, TypeVar

from shared.domain.value_objects import TimeWindow

T = TypeVar("T")


def overlapping(
    proposed: TimeWindow,
    candidates: Iterable[T],
    window_of: Callable[[T], TimeWindow] = lambda c: c.window,
) -> List[T]:
    """Candidates whose window overlaps ``proposed``, in input order.

    Touching endpoints (one ends at 10:00, the next starts at 10:00) do
    not overlap.
    """
    return [candidate for candidate in candidates if window_of(candidate).overlaps_with(proposed)]

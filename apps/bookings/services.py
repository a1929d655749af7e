"""Store-backed conflict detection for ensemble bookings."""

from __future__ import annotations

from typing import List

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from shared.domain.value_objects import TimeWindow

from .domain.conflicts import overlapping
from .models import Booking, EnsembleCalendar


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def lock_ensemble() -> EnsembleCalendar:
    """Take the ensemble calendar row lock for the current transaction.

    Every approval goes through this row, so two approvals of overlapping
    bookings cannot both read "no conflicts" before either commits.
    """

    EnsembleCalendar.load()
    return _lock_queryset_if_possible(EnsembleCalendar.objects.filter(pk=1)).get()


def conflicts_for_window(window: TimeWindow, exclude_booking_id=None) -> List[Booking]:
    """Approved bookings whose window overlaps ``window``."""

    candidates = Booking.objects.approved().on_window(window)
    if exclude_booking_id is not None:
        candidates = candidates.exclude(pk=exclude_booking_id)
    # The query narrows by date and time; the domain check decides.
    return overlapping(window, candidates.order_by("start_time", "pk"))


def find_conflicts(booking: Booking) -> List[Booking]:
    """Approved bookings, other than ``booking`` itself, that overlap it."""

    return conflicts_for_window(booking.window, exclude_booking_id=booking.pk)

"""Conflict detection over in-memory booking windows."""

from dataclasses import dataclass
from datetime import date, time

import pytest

from apps.bookings.domain.conflicts import overlapping
from apps.bookings.domain.lifecycle import APPROVED, BOOKING_LIFECYCLE, PENDING, REJECTED
from shared.domain.errors import InvalidRange, InvalidTransition
from shared.domain.lifecycle import INVOICE
from shared.domain.value_objects import TimeWindow

DAY = date(2025, 9, 26)


@dataclass
class Slot:
    name: str
    window: TimeWindow


def _window(start_hour: int, end_hour: int, day: date = DAY) -> TimeWindow:
    return TimeWindow(day, time(start_hour), time(end_hour))


def test_window_must_have_positive_length():
    with pytest.raises(InvalidRange):
        _window(10, 10)
    with pytest.raises(InvalidRange):
        _window(12, 10)


def test_touching_windows_do_not_overlap():
    assert not _window(8, 10).overlaps_with(_window(10, 12))
    assert not _window(10, 12).overlaps_with(_window(8, 10))


def test_partial_overlap_is_a_conflict():
    assert _window(14, 18).overlaps_with(_window(16, 20))


def test_same_times_on_another_date_do_not_overlap():
    assert not _window(14, 18).overlaps_with(_window(14, 18, date(2025, 9, 27)))


def test_overlapping_returns_all_conflicts_in_order():
    candidates = [
        Slot("morning", _window(8, 10)),
        Slot("afternoon", _window(14, 18)),
        Slot("evening", _window(19, 22)),
    ]

    found = overlapping(_window(9, 20), candidates)

    assert [slot.name for slot in found] == ["morning", "afternoon", "evening"]
    assert overlapping(_window(10, 14), candidates) == []


def test_booking_approval_authorizes_invoice():
    assert INVOICE in BOOKING_LIFECYCLE.ensure(PENDING, APPROVED)
    assert INVOICE not in BOOKING_LIFECYCLE.ensure(PENDING, REJECTED)


def test_decided_bookings_are_terminal():
    with pytest.raises(InvalidTransition):
        BOOKING_LIFECYCLE.ensure(APPROVED, REJECTED)
    with pytest.raises(InvalidTransition):
        BOOKING_LIFECYCLE.ensure(REJECTED, PENDING)

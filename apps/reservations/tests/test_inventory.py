"""Availability and cart admission over in-memory catalog/ledger snapshots."""

from datetime import date
from decimal import Decimal
from unittest import mock

import pytest

from apps.catalog.domain import CatalogEntry
from apps.reservations.domain import lifecycle
from apps.reservations.domain.inventory import (
    Allocation,
    CartLine,
    InstrumentInventory,
    admit_cart,
    available_from,
    covering_range,
)
from shared.domain.errors import InvalidRange, InvalidTransition
from shared.domain.value_objects import DateRange


def _range(start_day: int, end_day: int) -> DateRange:
    return DateRange(date(2025, 10, start_day), date(2025, 10, end_day))


def _trumpets(total: int = 3, **kwargs) -> CatalogEntry:
    return CatalogEntry(instrument_id=1, slug="trumpet", total_quantity=total, **kwargs)


def test_date_range_rejects_start_after_end():
    with pytest.raises(InvalidRange):
        _range(5, 4)


def test_date_ranges_sharing_a_day_overlap():
    assert _range(1, 5).overlaps_with(_range(5, 9))
    assert not _range(1, 5).overlaps_with(_range(6, 9))
    assert len(_range(1, 1)) == 1


def test_available_counts_only_overlapping_consuming_allocations():
    inventory = InstrumentInventory(
        entry=_trumpets(),
        allocations=[
            Allocation(quantity=2, dates=_range(1, 3), status=lifecycle.APPROVED),
            Allocation(quantity=1, dates=_range(2, 2), status=lifecycle.REJECTED),
            Allocation(quantity=1, dates=_range(10, 12), status=lifecycle.PENDING),
        ],
    )

    assert inventory.available_quantity(_range(1, 3)) == 1
    assert inventory.available_quantity(_range(4, 9)) == 3
    assert inventory.available_quantity(_range(3, 10)) == 0


def test_returned_and_rejected_requests_release_stock():
    inventory = InstrumentInventory(
        entry=_trumpets(total=1),
        allocations=[
            Allocation(quantity=1, dates=_range(1, 3), status=lifecycle.RETURNED),
            Allocation(quantity=1, dates=_range(1, 3), status=lifecycle.REJECTED),
        ],
    )

    assert inventory.available_quantity(_range(1, 3)) == 1


def test_unavailable_or_archived_instrument_reports_zero():
    assert available_from(_trumpets(condition_status="unavailable"), 0) == 0
    assert available_from(_trumpets(is_archived=True), 0) == 0


def test_over_commitment_is_floored_and_logged():
    with mock.patch("apps.reservations.domain.inventory.logger") as logger:
        assert available_from(_trumpets(total=2), 5, _range(1, 2)) == 0

    logger.error.assert_called_once()
    assert "over-committed by 3" in logger.error.call_args[0][0]


def test_allocate_refuses_more_than_available():
    inventory = InstrumentInventory(entry=_trumpets(total=2))
    inventory.allocate(_range(1, 2), 2)

    assert not inventory.can_allocate(_range(2, 3), 1)
    with pytest.raises(ValueError):
        inventory.allocate(_range(2, 3), 1)


def test_cart_lines_on_same_instrument_compete_for_stock():
    inventories = {1: InstrumentInventory(entry=_trumpets(total=3))}
    lines = [
        CartLine(index=0, instrument_id=1, quantity=2, dates=_range(1, 2)),
        CartLine(index=1, instrument_id=1, quantity=2, dates=_range(2, 4)),
    ]

    shortfalls = admit_cart(inventories, lines)

    assert len(shortfalls) == 1
    assert shortfalls[0].index == 1
    assert shortfalls[0].requested == 2
    assert shortfalls[0].available == 1
    assert shortfalls[0].deficit == 1


def test_cart_reports_every_offending_line():
    inventories = {
        1: InstrumentInventory(entry=_trumpets(total=1)),
        2: InstrumentInventory(
            entry=CatalogEntry(instrument_id=2, slug="tuba", total_quantity=1, price_per_day=Decimal("500"))
        ),
    }
    lines = [
        CartLine(index=0, instrument_id=1, quantity=2, dates=_range(1, 1)),
        CartLine(index=1, instrument_id=2, quantity=3, dates=_range(1, 1)),
    ]

    shortfalls = admit_cart(inventories, lines)

    assert [s.instrument for s in shortfalls] == ["trumpet", "tuba"]
    assert [s.deficit for s in shortfalls] == [1, 2]


def test_covering_range_spans_all_ranges():
    assert covering_range([_range(3, 4), _range(1, 2), _range(6, 8)]) == _range(1, 8)


@pytest.mark.parametrize(
    "kind, current, target",
    [
        ("rent", lifecycle.PENDING, lifecycle.PAID),
        ("rent", lifecycle.APPROVED, lifecycle.RETURNED),
        ("rent", lifecycle.REJECTED, lifecycle.APPROVED),
        ("rent", lifecycle.RETURNED, lifecycle.PENDING),
        ("borrow", lifecycle.APPROVED, lifecycle.PAID),
        ("borrow", lifecycle.PENDING, lifecycle.PENDING),
    ],
)
def test_illegal_transitions_are_refused(kind, current, target):
    with pytest.raises(InvalidTransition):
        lifecycle.lifecycle_for(kind).ensure(current, target)


def test_rent_lifecycle_runs_to_returned():
    machine = lifecycle.RENT_LIFECYCLE
    path = [lifecycle.PENDING, lifecycle.APPROVED, lifecycle.PAID, lifecycle.RETURNED]

    for current, target in zip(path, path[1:]):
        assert "notify" in machine.ensure(current, target)
    assert machine.is_terminal(lifecycle.RETURNED)
    assert machine.is_terminal(lifecycle.REJECTED)

"""Store-backed availability for instrument requests."""

from __future__ import annotations

from typing import Iterable

from django.db import transaction  # type: ignore
from django.db.models import Q, Sum  # type: ignore
from django.db.models.functions import Coalesce  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from apps.catalog.models import Instrument
from shared.domain.errors import NotFound
from shared.domain.value_objects import DateRange

from .domain import lifecycle
from .domain.inventory import InstrumentInventory, available_from
from .models import ReservationRequest


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def instrument_lookup(instrument_ref) -> Q:
    """Filter for an instrument given by model, primary key or slug.

    A digit-only string is a slug first and a primary key only when no
    instrument carries that slug.
    """
    if isinstance(instrument_ref, Instrument):
        return Q(pk=instrument_ref.pk)
    if isinstance(instrument_ref, int):
        return Q(pk=instrument_ref)
    ref = str(instrument_ref)
    if ref.isdigit() and not Instrument.objects.filter(slug=ref).exists():
        return Q(pk=int(ref))
    return Q(slug=ref)


def get_instrument(instrument_ref) -> Instrument:
    """Resolve an instrument by primary key or slug."""

    instrument = Instrument.objects.filter(instrument_lookup(instrument_ref)).first()
    if instrument is None:
        raise NotFound("Instrument", instrument_ref)
    return instrument


def lock_instruments(instrument_ids: Iterable[int]) -> dict[int, Instrument]:
    """Lock instrument rows in ascending id order.

    The instrument row is the serialization point for admissions on that
    instrument: two carts touching it queue up here, and the second one
    reads the ledger only after the first has committed. A fixed lock
    order keeps multi-instrument carts from deadlocking each other.
    """

    ids = sorted(set(instrument_ids))
    queryset = _lock_queryset_if_possible(Instrument.objects.filter(pk__in=ids).order_by("pk"))
    locked = {instrument.pk: instrument for instrument in queryset}
    missing = [pk for pk in ids if pk not in locked]
    if missing:
        raise NotFound("Instrument", missing[0])
    return locked


def load_inventory(instrument: Instrument, period: DateRange) -> InstrumentInventory:
    """Build the inventory aggregate for every allocation overlapping ``period``."""

    rows = (
        ReservationRequest.objects.filter(instrument=instrument)
        .consuming_capacity()
        .overlapping(period)
        .only("id", "quantity", "start_date", "end_date", "status")
    )
    return InstrumentInventory(
        entry=instrument.to_entry(),
        allocations=[row.to_allocation() for row in rows],
    )


def available_quantity(instrument_ref, dates: DateRange) -> int:
    """Quantity of an instrument not committed to overlapping requests.

    The catalog value and the committed sum come from one SQL statement,
    so both belong to the same snapshot. The figure is advisory: admission
    recomputes it under lock (see ``lock_instruments``/``load_inventory``).
    """

    committed_filter = Q(
        reservation_requests__status__in=lifecycle.CAPACITY_CONSUMING,
        reservation_requests__start_date__lte=dates.end_date,
        reservation_requests__end_date__gte=dates.start_date,
    )
    instrument = (
        Instrument.objects.filter(instrument_lookup(instrument_ref))
        .annotate(committed=Coalesce(Sum("reservation_requests__quantity", filter=committed_filter), 0))
        .first()
    )
    if instrument is None:
        raise NotFound("Instrument", instrument_ref)
    return available_from(instrument.to_entry(), instrument.committed, dates)


def availability_breakdown(instrument_ref, dates: DateRange) -> dict:
    """Availability plus the allocations that explain it."""

    with transaction.atomic():
        instrument = get_instrument(instrument_ref)
        inventory = load_inventory(instrument, dates)
    allocations = inventory.allocations_for_period(dates)
    return {
        "instrument": instrument.slug,
        "start_date": dates.start_date,
        "end_date": dates.end_date,
        "total_quantity": instrument.total_quantity,
        "reservable": instrument.to_entry().is_reservable,
        "committed_quantity": sum(a.quantity for a in allocations),
        "available_quantity": inventory.available_quantity(dates),
        "allocations": [
            {
                "request_id": a.request_id,
                "quantity": a.quantity,
                "start_date": a.dates.start_date,
                "end_date": a.dates.end_date,
                "status": a.status,
            }
            for a in allocations
        ],
    }

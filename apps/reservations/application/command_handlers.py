"""
Reservation Command Handlers

Use cases for instrument requests. Each handler runs inside one
``DjangoUnitOfWork``: the transaction that re-validates the invariant is
the same transaction that writes the ledger.

Commands:
- CreateReservationCartCommand: Admit a batch of rent/borrow lines
- TransitionRequestStatusCommand: Move a request along its lifecycle
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional
from uuid import UUID
import logging

from django.db import IntegrityError
from django.utils import timezone

from apps.catalog.models import Instrument
from apps.catalog.pricing import PricingTable, get_pricing_table
from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import InsufficientAvailability, NotFound
from shared.domain.value_objects import DateRange
from apps.reservations.domain import lifecycle
from apps.reservations.domain.events import ReservationCartCreated, ReservationRequestStatusChanged
from apps.reservations.domain.inventory import CartLine, admit_cart, covering_range
from apps.reservations.models import ReservationCart, ReservationRequest
from apps.reservations.services import instrument_lookup, load_inventory, lock_instruments

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CartItem:
    """One line of a cart as submitted by the client."""
    instrument: object  # primary key or slug
    quantity: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    client_ref: Optional[str] = None


@dataclass
class CreateReservationCartCommand:
    """
    Command to reserve several instruments at once

    ``start_date``/``end_date`` on the command override every item's range.
    """
    items: List[CartItem]
    requester_name: str
    requester_email: str
    kind: str = ReservationRequest.Kind.RENT
    requester_phone: str = ''
    purpose: str = ''
    notes: str = ''
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    idempotency_key: Optional[str] = None
    requested_by_id: Optional[int] = None


@dataclass
class TransitionRequestStatusCommand:
    """Command to approve, reject, mark paid or mark returned"""
    request_id: int
    target_status: str
    actor_id: Optional[int] = None


@dataclass
class CartResult:
    cart_id: UUID
    request_ids: List[int]
    reconciliation: Dict[str, int] = field(default_factory=dict)
    replayed: bool = False


# ===== Command Handlers =====

class CreateReservationCartHandler:
    """
    Handler for CreateReservationCart

    Strategy:
    1. Resolve every line to an instrument and a date range (no locks yet)
    2. Open the unit of work and lock the instrument rows in id order,
       then replay if the idempotency key was committed meanwhile
    3. Load each instrument's inventory for the period its lines cover
    4. Admit the lines in order; any shortfall aborts the whole cart
    5. Insert one pending request per line, in input order
    6. Publish ReservationCartCreated after commit
    """

    def __init__(self, pricing: Optional[PricingTable] = None):
        self.pricing = pricing

    def handle(self, command: CreateReservationCartCommand) -> CartResult:
        if not command.items:
            raise ValueError("A cart needs at least one item")
        if command.kind not in ReservationRequest.Kind.values:
            raise ValueError(f"Unknown request kind: {command.kind}")

        if command.idempotency_key:
            replay = self._replay(command.idempotency_key)
            if replay:
                return replay

        lines = self._resolve_lines(command)

        try:
            return self._admit(command, lines)
        except IntegrityError:
            # A concurrent submission with the same key won the unique index.
            replay = self._replay(command.idempotency_key) if command.idempotency_key else None
            if replay:
                return replay
            raise

    def _resolve_lines(self, command: CreateReservationCartCommand) -> List[CartLine]:
        common = None
        if command.start_date or command.end_date:
            common = DateRange(
                command.start_date or command.end_date,
                command.end_date or command.start_date,
            )

        refs = {item.instrument for item in command.items}
        known: Dict[object, int] = {}
        for ref in refs:
            instrument_id = (
                Instrument.objects.filter(instrument_lookup(ref))
                .values_list("pk", flat=True)
                .first()
            )
            if instrument_id is None:
                raise NotFound("Instrument", ref)
            known[ref] = instrument_id

        lines = []
        for index, item in enumerate(command.items):
            if item.quantity < 1:
                raise ValueError(f"Item {index}: quantity must be at least 1")
            if common is not None:
                dates = common
            else:
                if item.start_date is None or item.end_date is None:
                    raise ValueError(f"Item {index}: start and end dates are required")
                dates = DateRange(item.start_date, item.end_date)
            lines.append(CartLine(
                index=index,
                instrument_id=known[item.instrument],
                quantity=item.quantity,
                dates=dates,
            ))
        return lines

    def _admit(self, command: CreateReservationCartCommand, lines: List[CartLine]) -> CartResult:
        pricing = self.pricing or get_pricing_table()

        with DjangoUnitOfWork() as uow:
            instruments = lock_instruments(line.instrument_id for line in lines)

            # A submission with the same key may have committed while we waited.
            if command.idempotency_key:
                replay = self._replay(command.idempotency_key)
                if replay:
                    return replay

            inventories = {}
            for instrument_id, instrument in instruments.items():
                period = covering_range(
                    line.dates for line in lines if line.instrument_id == instrument_id
                )
                inventories[instrument_id] = load_inventory(instrument, period)

            shortfalls = admit_cart(inventories, lines)
            if shortfalls:
                raise InsufficientAvailability(shortfalls)

            cart = ReservationCart.objects.create(
                idempotency_key=command.idempotency_key or None,
                requester_email=command.requester_email,
            )

            requests = []
            for line in lines:
                instrument = instruments[line.instrument_id]
                fee = 0
                if command.kind == ReservationRequest.Kind.RENT:
                    fee = pricing.rental_fee(instrument.to_entry(), line.dates, line.quantity).amount
                requests.append(ReservationRequest.objects.create(
                    kind=command.kind,
                    instrument=instrument,
                    cart=cart,
                    cart_position=line.index,
                    quantity=line.quantity,
                    start_date=line.dates.start_date,
                    end_date=line.dates.end_date,
                    requester_name=command.requester_name,
                    requester_email=command.requester_email,
                    requester_phone=command.requester_phone,
                    purpose=command.purpose,
                    notes=command.notes,
                    requested_by_id=command.requested_by_id,
                    rental_fee=fee,
                ))

            uow.record(ReservationCartCreated(
                aggregate_id=cart.id,
                cart_id=cart.id,
                kind=command.kind,
                request_ids=[r.pk for r in requests],
                instruments=[instruments[line.instrument_id].slug for line in lines],
                requester_email=command.requester_email,
            ))

        logger.info(
            f"Cart {cart.id} admitted with {len(requests)} request(s) "
            f"for {command.requester_email}"
        )
        return CartResult(
            cart_id=cart.id,
            request_ids=[r.pk for r in requests],
            reconciliation=_reconcile(command.items, [r.pk for r in requests]),
        )

    def _replay(self, idempotency_key: str) -> Optional[CartResult]:
        cart = ReservationCart.objects.filter(idempotency_key=idempotency_key).first()
        if cart is None:
            return None
        logger.info(f"Replaying cart {cart.id} for idempotency key {idempotency_key}")
        return CartResult(cart_id=cart.id, request_ids=cart.request_ids(), replayed=True)


def _reconcile(items: List[CartItem], request_ids: List[int]) -> Dict[str, int]:
    """Map provisional client references to the ids the ledger issued."""
    return {
        item.client_ref: request_id
        for item, request_id in zip(items, request_ids)
        if item.client_ref
    }


class TransitionRequestStatusHandler:
    """
    Handler for request status changes

    Approval needs no capacity re-check: a pending request already holds
    its share of stock. Rejection and return release that share.
    """

    def handle(self, command: TransitionRequestStatusCommand) -> ReservationRequest:
        logger.info(f"Moving reservation request {command.request_id} to {command.target_status}")

        with DjangoUnitOfWork() as uow:
            # Row lock serializes concurrent transitions of the same request.
            request = (
                ReservationRequest.objects.select_for_update()
                .filter(pk=command.request_id)
                .first()
            )
            if request is None:
                raise NotFound("Reservation request", command.request_id)

            machine = lifecycle.lifecycle_for(request.kind)
            effects = machine.ensure(request.status, command.target_status)

            old_status = request.status
            now = timezone.now()
            request.status = command.target_status
            update_fields = ["status", "updated_at"]
            if command.target_status in (lifecycle.APPROVED, lifecycle.REJECTED):
                request.decided_by_id = command.actor_id
                request.decided_at = now
                update_fields += ["decided_by", "decided_at"]
            elif command.target_status == lifecycle.PAID:
                request.paid_at = now
                update_fields.append("paid_at")
            elif command.target_status == lifecycle.RETURNED:
                request.returned_at = now
                update_fields.append("returned_at")
            request.save(update_fields=update_fields)

            uow.record(ReservationRequestStatusChanged(
                aggregate_id=request.pk,
                request_id=request.pk,
                kind=request.kind,
                instrument=request.instrument.slug,
                quantity=request.quantity,
                dates=request.dates,
                old_status=old_status,
                new_status=request.status,
                requester_email=request.requester_email,
                effects=list(effects),
            ))

        logger.info(f"Reservation request {request.pk}: {old_status} -> {request.status}")
        return request

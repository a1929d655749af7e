"""
Booking Command Handlers

Use cases for ensemble bookings.

Commands:
- CreateBookingCommand: Submit a pending booking request
- TransitionBookingStatusCommand: Approve or reject a booking
"""

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import Optional
import logging

from django.utils import timezone

from apps.bookings.domain.events import BookingApproved, BookingCreated, BookingRejected
from apps.bookings.domain.lifecycle import APPROVED, BOOKING_LIFECYCLE, REJECTED
from apps.bookings.models import Booking
from apps.bookings.services import find_conflicts, lock_ensemble
from apps.catalog.pricing import PricingTable, get_pricing_table
from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import ConflictError, NotFound
from shared.domain.value_objects import Money, TimeWindow

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """Command to request the ensemble for one date and time slot"""
    customer_name: str
    email: str
    service: str
    date: date
    start_time: time
    end_time: time
    phone: str = ''
    package: str = ''
    pieces: int = 1
    location: str = ''
    notes: str = ''
    estimated_value: Optional[Decimal] = None
    requested_by_id: Optional[int] = None


@dataclass
class TransitionBookingStatusCommand:
    """Command to approve or reject a booking"""
    booking_id: int
    target_status: str
    actor_id: Optional[int] = None


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking

    The window is validated before anything is written, so a zero or
    negative window never reaches the ledger. Creation does not check
    conflicts: pending bookings do not hold the ensemble.
    """

    def __init__(self, pricing: Optional[PricingTable] = None):
        self.pricing = pricing

    def handle(self, command: CreateBookingCommand) -> Booking:
        if command.service not in Booking.Service.values:
            raise ValueError(f"Unknown service: {command.service}")

        window = TimeWindow(command.date, command.start_time, command.end_time)

        if command.estimated_value is not None:
            value = Money(command.estimated_value)
        else:
            pricing = self.pricing or get_pricing_table()
            value = pricing.booking_value(command.service, command.package, command.pieces)

        with DjangoUnitOfWork() as uow:
            booking = Booking.objects.create(
                customer_name=command.customer_name,
                email=command.email,
                phone=command.phone,
                service=command.service,
                package=command.package,
                pieces=command.pieces,
                location=command.location,
                date=window.date,
                start_time=window.start_time,
                end_time=window.end_time,
                estimated_value=value.amount,
                currency=value.currency,
                notes=command.notes,
                requested_by_id=command.requested_by_id,
            )
            uow.record(BookingCreated(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                service=booking.service,
                window=window,
                email=booking.email,
            ))

        logger.info(f"Booking {booking.pk} requested for {window} by {booking.email}")
        return booking


class TransitionBookingStatusHandler:
    """
    Handler for booking approval and rejection

    Strategy for approval:
    1. Lock the booking row (concurrent decisions on it queue up)
    2. Lock the ensemble calendar row (approvals queue up globally)
    3. Look for approved bookings overlapping this one
    4. Any conflict aborts with ConflictError; the booking stays pending
    5. Otherwise mark approved and publish BookingApproved after commit

    Rejection never needs the conflict check.
    """

    def handle(self, command: TransitionBookingStatusCommand) -> Booking:
        logger.info(f"Moving booking {command.booking_id} to {command.target_status}")

        with DjangoUnitOfWork() as uow:
            booking = (
                Booking.objects.select_for_update()
                .filter(pk=command.booking_id)
                .first()
            )
            if booking is None:
                raise NotFound("Booking", command.booking_id)

            effects = BOOKING_LIFECYCLE.ensure(booking.status, command.target_status)

            if command.target_status == APPROVED:
                lock_ensemble()
                conflicts = find_conflicts(booking)
                if conflicts:
                    raise ConflictError(conflicts, serialize=lambda b: b.summary())

            booking.status = command.target_status
            booking.decided_by_id = command.actor_id
            booking.decided_at = timezone.now()
            booking.save(update_fields=["status", "decided_by", "decided_at", "updated_at"])

            if booking.status == APPROVED:
                uow.record(BookingApproved(
                    aggregate_id=booking.pk,
                    booking_id=booking.pk,
                    service=booking.service,
                    window=booking.window,
                    estimated_value=Money(booking.estimated_value, booking.currency),
                    email=booking.email,
                    effects=list(effects),
                ))
            elif booking.status == REJECTED:
                uow.record(BookingRejected(
                    aggregate_id=booking.pk,
                    booking_id=booking.pk,
                    service=booking.service,
                    window=booking.window,
                    email=booking.email,
                    effects=list(effects),
                ))

        logger.info(f"Booking {booking.pk} is now {booking.status}")
        return booking

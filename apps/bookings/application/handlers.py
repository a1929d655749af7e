"""Subscribers to booking domain events."""

from __future__ import annotations

import logging

from apps.bookings.domain.events import BookingApproved, BookingCreated, BookingRejected
from apps.notifications.services import notify
from shared.domain.lifecycle import INVOICE, NOTIFY

logger = logging.getLogger(__name__)


def notify_booking_submitted(event: BookingCreated) -> None:
    notify(event.email, "booking.submitted", {"window": str(event.window), **event.to_dict()})


def notify_booking_decided(event) -> None:
    if NOTIFY not in event.effects:
        return
    status = "approved" if isinstance(event, BookingApproved) else "rejected"
    notify(event.email, f"booking.{status}", {"window": str(event.window), **event.to_dict()})


def enqueue_invoice(event: BookingApproved) -> None:
    """Ask the finance service for an invoice; the approval stands regardless."""
    if INVOICE not in event.effects:
        return
    try:
        from apps.finances.tasks import create_invoice_for_booking

        create_invoice_for_booking.delay(event.booking_id)
    except Exception as e:
        logger.error(f"Failed to queue invoice for booking {event.booking_id}: {e}", exc_info=True)


def register(bus) -> None:
    bus.register_event_handler(BookingCreated, notify_booking_submitted)
    bus.register_event_handler(BookingApproved, notify_booking_decided)
    bus.register_event_handler(BookingApproved, enqueue_invoice)
    bus.register_event_handler(BookingRejected, notify_booking_decided)

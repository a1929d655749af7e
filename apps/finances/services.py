"""Invoice creation for approved bookings."""

from __future__ import annotations

import logging

from django.db import transaction  # type: ignore

from apps.bookings.domain.lifecycle import APPROVED
from apps.bookings.models import Booking
from shared.domain.errors import NotFound

from .models import Invoice

logger = logging.getLogger(__name__)


def invoice_number(booking: Booking) -> str:
    return f"INV-{booking.date:%Y%m%d}-{booking.pk:05d}"


def create_invoice_for_booking(booking_id: int) -> Invoice | None:
    """Create the invoice for an approved booking.

    Safe to call more than once: an existing invoice is returned as is.
    Returns None when the booking is not approved.
    """

    with transaction.atomic():
        booking = Booking.objects.filter(pk=booking_id).first()
        if booking is None:
            raise NotFound("Booking", booking_id)
        if booking.status != APPROVED:
            logger.warning(f"Not invoicing booking {booking_id} in status {booking.status}")
            return None

        invoice, created = Invoice.objects.get_or_create(
            booking=booking,
            defaults={
                "number": invoice_number(booking),
                "amount": booking.estimated_value,
                "currency": booking.currency,
                "description": f"{booking.service} on {booking.window}",
            },
        )

    if created:
        logger.info(f"Issued invoice {invoice.number} for booking {booking_id}: {invoice.amount} {invoice.currency}")
    else:
        logger.info(f"Invoice {invoice.number} already exists for booking {booking_id}")
    return invoice

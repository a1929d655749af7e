"""Celery tasks for invoicing."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from shared.domain.errors import NotFound

logger = logging.getLogger(__name__)


@shared_task(name="finances.create_invoice_for_booking")
def create_invoice_for_booking(booking_id: int):
    from .services import create_invoice_for_booking as create_invoice

    try:
        invoice = create_invoice(booking_id)
    except NotFound:
        logger.warning(f"Booking {booking_id} vanished before it could be invoiced")
        return None
    return invoice.pk if invoice else None

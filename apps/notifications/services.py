"""Notification dispatcher for reservation and booking events."""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils import timezone  # type: ignore

from .models import Notification

logger = logging.getLogger(__name__)


# Titles and bodies per event; payload keys are interpolated with str.format.
TEMPLATES: dict[str, tuple[str, str]] = {
    "reservation.submitted": (
        "We received your instrument request",
        "Your request for {instruments} has been received and is pending approval.",
    ),
    "reservation.approved": (
        "Your instrument request was approved",
        "{quantity} x {instrument} for {dates} has been approved.",
    ),
    "reservation.rejected": (
        "Your instrument request was declined",
        "{quantity} x {instrument} for {dates} could not be approved.",
    ),
    "reservation.paid": (
        "Payment received",
        "Payment for {quantity} x {instrument} ({dates}) has been recorded.",
    ),
    "reservation.returned": (
        "Instrument returned",
        "Thank you for returning {quantity} x {instrument}.",
    ),
    "booking.submitted": (
        "We received your booking request",
        "Your booking for {window} is pending approval.",
    ),
    "booking.approved": (
        "Your booking was approved",
        "The ensemble is booked for {window}. An invoice will follow.",
    ),
    "booking.rejected": (
        "Your booking was declined",
        "We are unable to perform on {window}. Please contact us to reschedule.",
    ),
}


class _Defaults(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render(event: str, payload: dict[str, Any]) -> tuple[str, str]:
    title, body = TEMPLATES.get(event, (event.replace(".", " ").capitalize(), ""))
    context = _Defaults({key: value for key, value in payload.items()})
    return title.format_map(context), body.format_map(context)


def notify(recipient: str, event: str, payload: dict[str, Any]) -> bool:
    """
    Queue a notification without waiting for delivery.

    Returns False when the notice could not even be queued; the caller's
    state change stands either way.
    """
    if not recipient:
        logger.debug(f"Skipping {event} notification without recipient")
        return False

    try:
        from .tasks import send_notification

        send_notification.delay(recipient, event, payload)
        return True
    except Exception as e:
        logger.error(f"Failed to queue {event} notification for {recipient}: {e}", exc_info=True)
        return False


def deliver(recipient: str, event: str, payload: dict[str, Any]) -> Notification:
    """Record and email one notification; a mail failure is logged on the record."""
    title, message = render(event, payload)
    notification = Notification.objects.create(
        recipient=recipient,
        event=event,
        title=title,
        message=message,
        payload=payload,
    )

    try:
        send_mail(
            subject=title,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient],
            fail_silently=False,
        )
    except Exception as e:
        logger.error(f"Failed to send email to {recipient}: {e}", exc_info=True)
        notification.delivery_status = Notification.DeliveryStatus.FAILED
        notification.save(update_fields=["delivery_status"])
        return notification

    notification.delivery_status = Notification.DeliveryStatus.SENT
    notification.sent_at = timezone.now()
    notification.save(update_fields=["delivery_status", "sent_at"])
    logger.info(f"Email sent successfully to {recipient}: {title}")
    return notification

"""Subscribers to reservation domain events."""

from __future__ import annotations

import logging

from apps.notifications.services import notify
from apps.reservations.domain.events import ReservationCartCreated, ReservationRequestStatusChanged
from shared.domain.lifecycle import NOTIFY

logger = logging.getLogger(__name__)


def notify_cart_submitted(event: ReservationCartCreated) -> None:
    notify(
        event.requester_email,
        "reservation.submitted",
        {"instruments": ", ".join(sorted(set(event.instruments))), **event.to_dict()},
    )


def notify_request_status_changed(event: ReservationRequestStatusChanged) -> None:
    if NOTIFY not in event.effects:
        return
    notify(
        event.requester_email,
        f"reservation.{event.new_status}",
        {
            "instrument": event.instrument,
            "quantity": event.quantity,
            "dates": str(event.dates),
            **event.to_dict(),
        },
    )


def log_released_capacity(event: ReservationRequestStatusChanged) -> None:
    if event.releases_capacity:
        logger.info(
            f"Released {event.quantity} x {event.instrument} for {event.dates} "
            f"(request {event.request_id} {event.new_status})"
        )


def register(bus) -> None:
    bus.register_event_handler(ReservationCartCreated, notify_cart_submitted)
    bus.register_event_handler(ReservationRequestStatusChanged, notify_request_status_changed)
    bus.register_event_handler(ReservationRequestStatusChanged, log_released_capacity)

"""DRF exception handling for the reservation error taxonomy."""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.errors import Busy, ReservationError

logger = logging.getLogger(__name__)


def reservation_exception_handler(exc, context):
    """Render ``ReservationError`` as a structured payload.

    Everything else falls through to DRF's default handler; unhandled
    storage failures therefore end up as Django's generic 500.
    """

    if isinstance(exc, ReservationError):
        view = context.get("view")
        logger.info(
            f"{exc.code} in {view.__class__.__name__ if view else 'unknown view'}: {exc.detail}"
        )
        response = Response(exc.to_dict(), status=exc.status_code)
        if isinstance(exc, Busy):
            response["Retry-After"] = str(getattr(settings, "RESERVATIONS_BUSY_RETRY_AFTER", 1))
        return response

    return exception_handler(exc, context)

"""Celery tasks for notification delivery."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

logger = logging.getLogger(__name__)


@shared_task(name="notifications.send_notification", ignore_result=True)
def send_notification(recipient: str, event: str, payload: dict) -> None:
    from .services import deliver

    notification = deliver(recipient, event, payload)
    logger.debug(f"Notification {notification.pk} ({event}) {notification.delivery_status}")

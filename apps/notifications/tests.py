from unittest import mock

import pytest

from apps.notifications.models import Notification
from apps.notifications.services import deliver, notify, render


def test_render_fills_known_fields_and_keeps_unknown_ones():
    title, body = render("reservation.approved", {"quantity": 2, "instrument": "trumpet"})

    assert title == "Your instrument request was approved"
    assert body == "2 x trumpet for {dates} has been approved."


def test_notify_without_recipient_is_skipped():
    assert notify("", "reservation.approved", {}) is False


def test_notify_reports_queueing_failure():
    with mock.patch(
        "apps.notifications.tasks.send_notification.delay", side_effect=ConnectionError("broker down")
    ):
        assert notify("member@example.com", "reservation.approved", {}) is False


@pytest.mark.django_db
def test_delivery_failure_is_recorded():
    with mock.patch("apps.notifications.services.send_mail", side_effect=OSError("smtp down")):
        notification = deliver("member@example.com", "booking.rejected", {"window": "2025-09-26 14:00-18:00"})

    assert notification.delivery_status == Notification.DeliveryStatus.FAILED
    assert "2025-09-26" in notification.message

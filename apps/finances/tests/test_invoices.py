from datetime import date, time
from decimal import Decimal

import pytest

from apps.bookings.models import Booking
from apps.finances.models import Invoice
from apps.finances.services import create_invoice_for_booking
from apps.finances.tasks import create_invoice_for_booking as create_invoice_task
from shared.domain.errors import NotFound


def _booking(status=Booking.Status.APPROVED) -> Booking:
    return Booking.objects.create(
        customer_name="Town Fiesta",
        email="fiesta@example.com",
        service=Booking.Service.MUSIC_WORKSHOP,
        date=date(2025, 11, 3),
        start_time=time(9),
        end_time=time(12),
        status=status,
        estimated_value=Decimal("5000.00"),
    )


@pytest.mark.django_db
def test_invoice_is_created_once_per_booking():
    booking = _booking()

    first = create_invoice_for_booking(booking.pk)
    second = create_invoice_for_booking(booking.pk)

    assert first.pk == second.pk
    assert Invoice.objects.count() == 1
    assert first.number == f"INV-20251103-{booking.pk:05d}"
    assert first.amount == Decimal("5000.00")


@pytest.mark.django_db
def test_pending_booking_is_not_invoiced():
    booking = _booking(status=Booking.Status.PENDING)

    assert create_invoice_for_booking(booking.pk) is None
    assert not Invoice.objects.exists()


@pytest.mark.django_db
def test_missing_booking():
    with pytest.raises(NotFound):
        create_invoice_for_booking(999)

    assert create_invoice_task.delay(999).get() is None

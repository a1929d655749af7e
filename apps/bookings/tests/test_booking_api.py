"""Integration tests for ensemble booking endpoints."""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core import mail
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking, EnsembleCalendar
from apps.finances.models import Invoice

User = get_user_model()

DAY = date(2025, 9, 26)


class BookingAPITests(APITestCase):
    """Covers submission, approval conflicts and invoicing."""

    def setUp(self) -> None:
        self.staff = User.objects.create_user(
            username="director",
            email="director@example.com",
            password="DirectorPass123",
            is_staff=True,
        )
        self.list_url = reverse("ensemble-booking-list")

    def _booking(self, start_hour: int, end_hour: int, status=Booking.Status.PENDING, **kwargs) -> Booking:
        defaults = {
            "customer_name": "Town Fiesta",
            "email": "fiesta@example.com",
            "service": Booking.Service.BAND_GIG,
            "package": "full-band",
            "date": DAY,
            "start_time": time(start_hour),
            "end_time": time(end_hour),
            "status": status,
            "estimated_value": Decimal("35000.00"),
        }
        defaults.update(kwargs)
        return Booking.objects.create(**defaults)

    def _decide(self, booking: Booking, action: str):
        self.client.force_authenticate(self.staff)
        return self.client.post(reverse(f"ensemble-booking-{action}", args=[booking.pk]))

    def test_anyone_can_request_the_ensemble(self) -> None:
        payload = {
            "customer_name": "Town Fiesta",
            "email": "fiesta@example.com",
            "service": "Band Gig",
            "package": "30-players-with",
            "location": "Plaza",
            "date": str(DAY),
            "start_time": "14:00",
            "end_time": "18:00",
        }

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        booking = Booking.objects.get()
        self.assertEqual(booking.status, Booking.Status.PENDING)
        self.assertEqual(booking.estimated_value, Decimal("25000.00"))
        self.assertEqual(len(mail.outbox), 1)

    def test_zero_length_window_is_never_stored(self) -> None:
        payload = {
            "customer_name": "Town Fiesta",
            "email": "fiesta@example.com",
            "service": "Music Workshop",
            "date": str(DAY),
            "start_time": "10:00",
            "end_time": "10:00",
        }

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["error"], "invalid_range")
        self.assertFalse(Booking.objects.exists())

    def test_overlapping_approval_reports_conflicts(self) -> None:
        approved = self._booking(14, 18, status=Booking.Status.APPROVED)
        pending = self._booking(16, 20, customer_name="Parish Parade")

        response = self._decide(pending, "approve")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["error"], "booking_conflict")
        self.assertEqual([c["id"] for c in response.data["conflicts"]], [approved.pk])
        self.assertEqual(response.data["conflicts"][0]["start_time"], "14:00")
        pending.refresh_from_db()
        self.assertEqual(pending.status, Booking.Status.PENDING)

    def test_touching_bookings_can_both_be_approved(self) -> None:
        self._booking(8, 10, status=Booking.Status.APPROVED)
        pending = self._booking(10, 12)

        response = self._decide(pending, "approve")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], "approved")
        self.assertTrue(EnsembleCalendar.objects.filter(pk=1).exists())

    def test_rejection_skips_conflict_check(self) -> None:
        self._booking(14, 18, status=Booking.Status.APPROVED)
        pending = self._booking(15, 17)

        response = self._decide(pending, "reject")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], "rejected")
        self.assertEqual(response.data["decided_by"], self.staff.pk)

    def test_decided_booking_cannot_change_again(self) -> None:
        booking = self._booking(9, 11, status=Booking.Status.REJECTED)

        response = self._decide(booking, "approve")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["error"], "invalid_transition")

    def test_approval_raises_exactly_one_invoice(self) -> None:
        booking = self._booking(14, 18)

        with self.captureOnCommitCallbacks(execute=True):
            response = self._decide(booking, "approve")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        invoice = Invoice.objects.get(booking=booking)
        self.assertEqual(invoice.amount, Decimal("35000.00"))
        self.assertEqual(invoice.status, Invoice.Status.ISSUED)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn("approved", mail.outbox[0].subject)

    def test_conflicts_endpoint_lists_blocking_bookings(self) -> None:
        approved = self._booking(14, 18, status=Booking.Status.APPROVED)
        self._booking(9, 12, status=Booking.Status.APPROVED)
        pending = self._booking(17, 19)
        self.client.force_authenticate(self.staff)

        response = self.client.get(reverse("ensemble-booking-conflicts", args=[pending.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["has_conflicts"])
        self.assertEqual([c["id"] for c in response.data["conflicts"]], [approved.pk])

    def test_unknown_booking_is_not_found(self) -> None:
        self.client.force_authenticate(self.staff)

        response = self.client.post(reverse("ensemble-booking-approve", args=[4242]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)

    def test_listing_requires_staff(self) -> None:
        response = self.client.get(self.list_url)

        self.assertIn(
            response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)
        )

    def test_members_list_their_own_bookings(self) -> None:
        member = User.objects.create_user(
            username="fiesta", email="fiesta@example.com", password="FiestaPass123"
        )
        mine = self._booking(9, 11)
        self._booking(12, 14, email="someone@example.com")
        self.client.force_authenticate(member)

        response = self.client.get(reverse("ensemble-booking-mine"))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([b["id"] for b in response.data], [mine.pk])

    def test_non_numeric_booking_id_is_not_found(self) -> None:
        self.client.force_authenticate(self.staff)

        response = self.client.post("/api/v1/bookings/abc/approve/")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

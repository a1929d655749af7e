"""Transaction boundary behaviour: events after commit, busy mapping, races."""

from __future__ import annotations

import threading
from datetime import date
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import OperationalError, close_old_connections, connection
from django.test import TestCase, TransactionTestCase, skipUnlessDBFeature
from rest_framework.test import APITestCase

from apps.catalog.models import Instrument
from apps.reservations.application.command_handlers import (
    CartItem,
    CreateReservationCartCommand,
    CreateReservationCartHandler,
)
from apps.reservations.domain.events import ReservationCartCreated
from apps.reservations.models import ReservationCart, ReservationRequest
from apps.reservations.services import lock_instruments
from shared.application.message_bus import message_bus
from shared.application.uow import DjangoUnitOfWork, is_lock_contention
from shared.domain.errors import Busy, InsufficientAvailability

START = date(2025, 10, 6)
END = date(2025, 10, 10)


def _command(slug: str, quantity: int = 1, **kwargs) -> CreateReservationCartCommand:
    return CreateReservationCartCommand(
        items=[CartItem(instrument=slug, quantity=quantity)],
        requester_name="Member",
        requester_email="member@example.com",
        start_date=START,
        end_date=END,
        **kwargs,
    )


class UnitOfWorkTests(TestCase):
    def setUp(self) -> None:
        Instrument.objects.create(slug="trumpet", name="Trumpet", total_quantity=3)
        self.received = []
        message_bus.register_event_handler(ReservationCartCreated, self.received.append)
        self.addCleanup(
            message_bus.unregister_event_handler, ReservationCartCreated, self.received.append
        )

    def test_events_are_published_only_after_commit(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            result = CreateReservationCartHandler().handle(_command("trumpet"))
            self.assertEqual(self.received, [])

        [event] = self.received
        self.assertEqual(event.cart_id, result.cart_id)
        self.assertEqual(event.request_ids, result.request_ids)
        self.assertEqual(event.to_dict()["event_type"], "ReservationCartCreated")

    def test_refused_cart_publishes_nothing(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            with self.assertRaises(InsufficientAvailability):
                CreateReservationCartHandler().handle(_command("trumpet", quantity=4))

        self.assertEqual(self.received, [])
        self.assertFalse(ReservationRequest.objects.exists())

    def test_failing_subscriber_does_not_undo_the_cart(self) -> None:
        def explode(event):
            raise RuntimeError("mail server down")

        message_bus.register_event_handler(ReservationCartCreated, explode)
        self.addCleanup(message_bus.unregister_event_handler, ReservationCartCreated, explode)

        with self.captureOnCommitCallbacks(execute=True):
            CreateReservationCartHandler().handle(_command("trumpet"))

        self.assertEqual(ReservationRequest.objects.count(), 1)
        self.assertEqual(len(self.received), 1)

    def test_lock_contention_surfaces_as_busy(self) -> None:
        with self.assertRaises(Busy) as ctx:
            with DjangoUnitOfWork():
                raise OperationalError("database is locked")

        self.assertTrue(ctx.exception.retryable)
        self.assertEqual(ctx.exception.to_dict()["error"], "busy")

    def test_other_storage_errors_propagate_unchanged(self) -> None:
        with self.assertRaises(OperationalError):
            with DjangoUnitOfWork():
                raise OperationalError("disk I/O error")

    def test_lock_timeout_sqlstate_is_contention(self) -> None:
        class LockNotAvailable(Exception):
            pgcode = "55P03"

        cause = LockNotAvailable()
        error = OperationalError("canceling statement due to lock timeout")
        error.__cause__ = cause

        self.assertTrue(is_lock_contention(error))
        self.assertFalse(is_lock_contention(ValueError("database is locked")))

    def test_same_key_committed_while_waiting_for_the_lock_is_replayed(self) -> None:
        trumpet = Instrument.objects.get(slug="trumpet")
        winner = {}

        def lock_after_duplicate_commits(instrument_ids):
            instrument_ids = list(instrument_ids)
            cart = ReservationCart.objects.create(
                idempotency_key="cart-42", requester_email="member@example.com"
            )
            winner["request"] = ReservationRequest.objects.create(
                instrument=trumpet,
                cart=cart,
                quantity=3,
                start_date=START,
                end_date=END,
                requester_name="Member",
                requester_email="member@example.com",
            )
            winner["cart"] = cart
            return lock_instruments(instrument_ids)

        with mock.patch(
            "apps.reservations.application.command_handlers.lock_instruments",
            side_effect=lock_after_duplicate_commits,
        ):
            result = CreateReservationCartHandler().handle(
                _command("trumpet", quantity=3, idempotency_key="cart-42")
            )

        self.assertTrue(result.replayed)
        self.assertEqual(result.cart_id, winner["cart"].id)
        self.assertEqual(result.request_ids, [winner["request"].pk])
        self.assertEqual(ReservationRequest.objects.count(), 1)


class BusyResponseTests(APITestCase):
    def test_busy_maps_to_503_with_retry_after(self) -> None:
        Instrument.objects.create(slug="trumpet", name="Trumpet", total_quantity=3)
        payload = {
            "items": [{"instrument": "trumpet", "quantity": 1}],
            "start_date": str(START),
            "end_date": str(END),
            "requester_name": "Member",
            "requester_email": "member@example.com",
        }
        user = get_user_model().objects.create_user(username="member", password="pass")
        self.client.force_authenticate(user)

        with mock.patch(
            "apps.reservations.application.command_handlers.lock_instruments",
            side_effect=Busy(),
        ):
            response = self.client.post(
                "/api/v1/reservations/carts/", payload, format="json"
            )

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["error"], "busy")
        self.assertEqual(response["Retry-After"], "1")


@skipUnlessDBFeature("has_select_for_update")
class ConcurrentAdmissionTests(TransactionTestCase):
    """Races real transactions against each other; needs row locks (PostgreSQL)."""

    def test_concurrent_carts_never_oversell(self) -> None:
        Instrument.objects.create(slug="trumpet", name="Trumpet", total_quantity=3)
        outcomes = []
        barrier = threading.Barrier(6)

        def submit():
            try:
                barrier.wait()
                CreateReservationCartHandler().handle(_command("trumpet"))
                outcomes.append("admitted")
            except InsufficientAvailability:
                outcomes.append("refused")
            except Busy:
                outcomes.append("busy")
            finally:
                close_old_connections()
                connection.close()

        threads = [threading.Thread(target=submit) for _ in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(outcomes.count("admitted"), 3)
        self.assertEqual(outcomes.count("admitted") + outcomes.count("refused") + outcomes.count("busy"), 6)
        self.assertEqual(
            sum(ReservationRequest.objects.values_list("quantity", flat=True)), 3
        )

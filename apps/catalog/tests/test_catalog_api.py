"""Integration tests for the instrument catalog endpoints."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.catalog.models import Instrument


class InstrumentAPITests(APITestCase):
    def setUp(self) -> None:
        Instrument.objects.create(
            slug="trumpet", name="Trumpet", category="brass", total_quantity=3, price_per_day=Decimal("500")
        )
        Instrument.objects.create(
            slug="pearl-snare",
            name="Pearl Snare",
            category="percussion",
            total_quantity=1,
            price_per_day=Decimal("1000"),
            condition_status=Instrument.Condition.UNAVAILABLE,
        )
        Instrument.objects.create(
            slug="old-tuba", name="Old Tuba", category="brass", total_quantity=1, is_archived=True
        )

    def test_list_hides_archived_instruments(self) -> None:
        response = self.client.get(reverse("instrument-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        slugs = {item["slug"] for item in response.data}
        self.assertEqual(slugs, {"trumpet", "pearl-snare"})

    def test_detail_by_slug_reports_reservability(self) -> None:
        response = self.client.get(reverse("instrument-detail", args=["pearl-snare"]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["reservable"])

    def test_filter_by_category_and_stock(self) -> None:
        response = self.client.get(reverse("instrument-list"), {"category": "brass", "in_stock": "true"})

        self.assertEqual([item["slug"] for item in response.data], ["trumpet"])

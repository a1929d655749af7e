"""Serializers for invoices."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Invoice


class InvoiceSerializer(serializers.ModelSerializer):
    booking_id = serializers.ReadOnlyField(source="booking.id")

    class Meta:
        model = Invoice
        fields = [
            "id",
            "number",
            "booking_id",
            "amount",
            "currency",
            "status",
            "description",
            "issued_at",
            "paid_at",
        ]
        read_only_fields = fields

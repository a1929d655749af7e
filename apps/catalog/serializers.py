"""Serializers for the instrument catalog."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Instrument


class InstrumentSerializer(serializers.ModelSerializer):
    reservable = serializers.SerializerMethodField()

    class Meta:
        model = Instrument
        fields = [
            "id",
            "slug",
            "name",
            "category",
            "brand",
            "total_quantity",
            "price_per_day",
            "condition_status",
            "reservable",
            "notes",
        ]
        read_only_fields = fields

    def get_reservable(self, obj: Instrument) -> bool:
        return obj.to_entry().is_reservable

"""Serializers for ensemble bookings."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .application.command_handlers import CreateBookingCommand
from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Booking request as submitted by a customer."""

    customer_name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    service = serializers.ChoiceField(choices=Booking.Service.choices)
    package = serializers.CharField(max_length=64, required=False, allow_blank=True)
    pieces = serializers.IntegerField(min_value=1, default=1)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    date = serializers.DateField()
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()
    notes = serializers.CharField(required=False, allow_blank=True)
    estimated_value = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False
    )

    def to_command(self) -> CreateBookingCommand:
        data = self.validated_data
        user = self.context["request"].user
        return CreateBookingCommand(
            customer_name=data["customer_name"],
            email=data["email"],
            phone=data.get("phone", ""),
            service=data["service"],
            package=data.get("package", ""),
            pieces=data["pieces"],
            location=data.get("location", ""),
            date=data["date"],
            start_time=data["start_time"],
            end_time=data["end_time"],
            notes=data.get("notes", ""),
            estimated_value=data.get("estimated_value"),
            requested_by_id=user.pk if user.is_authenticated else None,
        )


class BookingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Booking
        fields = [
            "id",
            "customer_name",
            "email",
            "phone",
            "service",
            "package",
            "pieces",
            "location",
            "date",
            "start_time",
            "end_time",
            "status",
            "estimated_value",
            "currency",
            "notes",
            "decided_by",
            "decided_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

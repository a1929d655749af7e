"""Serializers for instrument requests."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .application.command_handlers import CartItem, CreateReservationCartCommand
from .models import ReservationRequest


class AvailabilityQuerySerializer(serializers.Serializer):
    instrument = serializers.CharField()
    start = serializers.DateField()
    end = serializers.DateField()


class CartItemSerializer(serializers.Serializer):
    instrument = serializers.CharField(help_text="Instrument slug or id.")
    quantity = serializers.IntegerField(min_value=1)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    client_ref = serializers.CharField(required=False, allow_blank=False, max_length=64)


class ReservationCartSerializer(serializers.Serializer):
    """Submission of several instrument lines as one atomic cart."""

    kind = serializers.ChoiceField(
        choices=ReservationRequest.Kind.choices,
        default=ReservationRequest.Kind.RENT,
    )
    items = CartItemSerializer(many=True, allow_empty=False)
    start_date = serializers.DateField(required=False, help_text="Overrides every item's start date.")
    end_date = serializers.DateField(required=False, help_text="Overrides every item's end date.")
    requester_name = serializers.CharField(max_length=150, required=False)
    requester_email = serializers.EmailField(required=False)
    requester_phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    purpose = serializers.CharField(max_length=255, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    idempotency_key = serializers.CharField(max_length=128, required=False)

    def validate(self, attrs):  # type: ignore
        has_common = "start_date" in attrs or "end_date" in attrs
        if not has_common:
            for index, item in enumerate(attrs["items"]):
                if "start_date" not in item or "end_date" not in item:
                    raise serializers.ValidationError(
                        {"items": [f"Item {index} needs start_date and end_date."]}
                    )
        refs = [item["client_ref"] for item in attrs["items"] if item.get("client_ref")]
        if len(refs) != len(set(refs)):
            raise serializers.ValidationError({"items": ["client_ref values must be unique."]})

        user = self.context["request"].user
        if not attrs.get("requester_email"):
            attrs["requester_email"] = getattr(user, "email", "") or ""
        if not attrs.get("requester_name"):
            full_name = user.get_full_name() if hasattr(user, "get_full_name") else ""
            attrs["requester_name"] = full_name or getattr(user, "username", "")
        if not attrs["requester_email"]:
            raise serializers.ValidationError({"requester_email": ["This field is required."]})
        return attrs

    def to_command(self, idempotency_key: str | None = None) -> CreateReservationCartCommand:
        data = self.validated_data
        user = self.context["request"].user
        return CreateReservationCartCommand(
            items=[
                CartItem(
                    instrument=item["instrument"],
                    quantity=item["quantity"],
                    start_date=item.get("start_date"),
                    end_date=item.get("end_date"),
                    client_ref=item.get("client_ref"),
                )
                for item in data["items"]
            ],
            kind=data["kind"],
            requester_name=data["requester_name"],
            requester_email=data["requester_email"],
            requester_phone=data.get("requester_phone", ""),
            purpose=data.get("purpose", ""),
            notes=data.get("notes", ""),
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            idempotency_key=idempotency_key or data.get("idempotency_key"),
            requested_by_id=user.pk if user.is_authenticated else None,
        )


class ReservationRequestSerializer(serializers.ModelSerializer):
    instrument = serializers.SlugRelatedField(slug_field="slug", read_only=True)
    cart_id = serializers.ReadOnlyField(source="cart.id")

    class Meta:
        model = ReservationRequest
        fields = [
            "id",
            "kind",
            "instrument",
            "cart_id",
            "quantity",
            "start_date",
            "end_date",
            "status",
            "requester_name",
            "requester_email",
            "requester_phone",
            "purpose",
            "notes",
            "requested_by",
            "rental_fee",
            "decided_by",
            "decided_at",
            "paid_at",
            "returned_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

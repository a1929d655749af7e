"""Admin registration for instrument requests."""

from __future__ import annotations

from django.contrib import admin

from .models import ReservationCart, ReservationRequest


class ReservationRequestInline(admin.TabularInline):
    model = ReservationRequest
    extra = 0
    fields = ("cart_position", "instrument", "quantity", "start_date", "end_date", "status")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):  # type: ignore
        return False


@admin.register(ReservationCart)
class ReservationCartAdmin(admin.ModelAdmin):
    list_display = ("id", "requester_email", "idempotency_key", "created_at")
    search_fields = ("requester_email", "idempotency_key")
    readonly_fields = ("id", "idempotency_key", "requester_email", "created_at")
    inlines = [ReservationRequestInline]

    def has_add_permission(self, request):  # type: ignore
        return False


@admin.register(ReservationRequest)
class ReservationRequestAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "kind",
        "instrument",
        "quantity",
        "start_date",
        "end_date",
        "status",
        "requester_email",
        "created_at",
    )
    list_filter = ("kind", "status", "start_date")
    search_fields = ("requester_name", "requester_email", "instrument__slug", "instrument__name")
    # Stock and status change only through the API, where capacity is
    # re-checked under lock. Contact details and notes stay editable.
    readonly_fields = (
        "kind",
        "instrument",
        "quantity",
        "start_date",
        "end_date",
        "status",
        "cart",
        "cart_position",
        "rental_fee",
        "requested_by",
        "decided_by",
        "decided_at",
        "paid_at",
        "returned_at",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):  # type: ignore
        return False

"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, EnsembleCalendar

WINDOW_FIELDS = ("date", "start_time", "end_time")


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "customer_name",
        "service",
        "date",
        "start_time",
        "end_time",
        "status",
        "estimated_value",
        "created_at",
    )
    list_filter = ("status", "service", "date")
    search_fields = ("customer_name", "email", "location")
    # Approval must go through the API so conflicts are checked.
    readonly_fields = (
        "status",
        "requested_by",
        "decided_by",
        "decided_at",
        "created_at",
        "updated_at",
    )

    def get_readonly_fields(self, request, obj=None):  # type: ignore
        fields = super().get_readonly_fields(request, obj)
        # A decided booking keeps its window; moving it would skip the conflict check.
        if obj is not None and obj.status != Booking.Status.PENDING:
            return tuple(fields) + WINDOW_FIELDS
        return fields


@admin.register(EnsembleCalendar)
class EnsembleCalendarAdmin(admin.ModelAdmin):
    list_display = ("name", "updated_at")

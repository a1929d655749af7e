"""Admin registration for the instrument catalog."""

from __future__ import annotations

from django.contrib import admin

from .models import Instrument


@admin.register(Instrument)
class InstrumentAdmin(admin.ModelAdmin):
    list_display = (
        "slug",
        "name",
        "category",
        "total_quantity",
        "price_per_day",
        "condition_status",
        "is_archived",
    )
    list_filter = ("category", "condition_status", "is_archived")
    search_fields = ("slug", "name", "brand")
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ("created_at", "updated_at")

"""Admin registration for invoices."""

from __future__ import annotations

from django.contrib import admin

from .models import Invoice


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("number", "booking", "amount", "currency", "status", "issued_at", "paid_at")
    list_filter = ("status", "currency")
    search_fields = ("number", "booking__customer_name", "booking__email")
    readonly_fields = ("booking", "number", "created_at", "updated_at")

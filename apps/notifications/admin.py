"""Admin registration for notifications."""

from __future__ import annotations

from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("recipient", "event", "title", "delivery_status", "created_at", "sent_at")
    list_filter = ("event", "delivery_status")
    search_fields = ("recipient", "title")
    readonly_fields = ("payload", "created_at", "sent_at")

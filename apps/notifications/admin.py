"""Admin registration for notifications."""

from __future__ import annotations

from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "user", "kind", "priority", "transaction", "is_read", "created_at")
    list_filter = ("kind", "priority", "is_read", "created_at")
    search_fields = ("title", "message", "user__email")
    readonly_fields = ("user", "transaction", "kind", "title", "message", "metadata", "priority", "created_at")

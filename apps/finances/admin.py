"""Admin registration for the ledger."""

from __future__ import annotations

from django.contrib import admin

from .models import SavingsTransaction, WebhookDelivery


class WebhookDeliveryInline(admin.TabularInline):
    model = WebhookDelivery
    extra = 0
    can_delete = False
    fields = ("event", "outcome", "created_at")
    readonly_fields = fields


@admin.register(SavingsTransaction)
class SavingsTransactionAdmin(admin.ModelAdmin):
    list_display = (
        "reference_id",
        "transaction_reference",
        "user",
        "transaction_type",
        "amount",
        "status",
        "payment_method",
        "created_at",
    )
    list_filter = ("status", "transaction_type", "payment_method", "created_at")
    search_fields = ("reference_id", "transaction_reference", "user__email")
    readonly_fields = (
        "user",
        "amount",
        "transaction_type",
        "status",
        "payment_method",
        "reference_id",
        "transaction_reference",
        "payment_details",
        "metadata",
        "created_at",
        "updated_at",
    )
    inlines = [WebhookDeliveryInline]

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False


@admin.register(WebhookDelivery)
class WebhookDeliveryAdmin(admin.ModelAdmin):
    list_display = ("event", "reference", "outcome", "transaction", "created_at")
    list_filter = ("event", "outcome", "created_at")
    search_fields = ("reference",)
    readonly_fields = ("transaction", "event", "reference", "payload", "outcome", "created_at")

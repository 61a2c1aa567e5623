"""Serializers for the ledger and the payment endpoints."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import SavingsTransaction


class PaymentMetadataSerializer(serializers.Serializer):
    user_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)


class InitiatePaymentSerializer(serializers.Serializer):
    """Request shape for ``POST /payments/initiate``.

    Only the shape is checked here; amount, phone and network rules are
    enforced by the initiation handler.
    """

    amount = serializers.CharField()
    phone = serializers.CharField(max_length=32)
    network = serializers.CharField(max_length=32)
    metadata = PaymentMetadataSerializer(required=False, default=dict)
    description = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate_amount(self, value):
        return value.strip()


class SavingsTransactionSerializer(serializers.ModelSerializer):
    network = serializers.SerializerMethodField()

    class Meta:
        model = SavingsTransaction
        fields = [
            "id",
            "amount",
            "transaction_type",
            "status",
            "payment_method",
            "reference_id",
            "transaction_reference",
            "network",
            "payment_details",
            "description",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_network(self, obj: SavingsTransaction) -> str | None:
        return obj.details.network

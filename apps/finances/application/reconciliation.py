"""
Webhook Reconciliation

Matches gateway events to ledger transactions and applies them exactly
once. Also hosts the verify use case, which asks the gateway directly
and feeds its answer through the same guarded transition.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Sequence
import json

import structlog

from apps.finances.application.outcomes import apply_charge_result
from apps.finances.exceptions import (
    AmountMismatch,
    DuplicateWebhook,
    MalformedWebhook,
    TransactionNotFound,
    ValidationError,
)
from apps.finances.models import SavingsTransaction, WebhookDelivery
from apps.finances.paystack_service import FAILED, SUCCESS, ChargeResult, PaystackGateway
from apps.finances.webhooks import WebhookVerifier

logger = structlog.get_logger(__name__)

CHARGE_SUCCESS = 'charge.success'
CHARGE_FAILED = 'charge.failed'
HANDLED_EVENTS = {CHARGE_SUCCESS: SUCCESS, CHARGE_FAILED: FAILED}


class TransactionResolver:
    """
    Find the transaction a gateway reference points at

    Lookups run in ``LOOKUP_ORDER``: the provider-facing
    ``transaction_reference`` is authoritative once set, the creation-time
    ``reference_id`` is the fallback.
    """

    LOOKUP_ORDER: Sequence[str] = ('transaction_reference', 'reference_id')

    def __init__(self, queryset=None):
        self.queryset = queryset if queryset is not None else SavingsTransaction.objects.all()

    def find(self, reference: Optional[str]) -> Optional[SavingsTransaction]:
        if not reference:
            return None
        for field_name in self.LOOKUP_ORDER:
            txn = self.queryset.filter(**{field_name: reference}).first()
            if txn is not None:
                return txn
        return None

    def resolve(self, reference: Optional[str]) -> SavingsTransaction:
        txn = self.find(reference)
        if txn is None:
            raise TransactionNotFound(f"No transaction found for reference {reference}")
        return txn


@dataclass(frozen=True)
class WebhookOutcome:
    event: str
    outcome: str
    reference: Optional[str] = None
    transaction_id: Optional[int] = None


class ReconcileWebhookHandler:
    """
    Handler for inbound gateway webhooks

    Raises (each mapped to an HTTP status by the view):
        SignatureInvalid: body failed authentication, nothing recorded
        MalformedWebhook: body is not a usable event
        TransactionNotFound: reference matches no transaction
        DuplicateWebhook: transaction already terminal, acknowledged
        AmountMismatch: settled amount disagrees, acknowledged, left pending
    """

    def __init__(self, verifier: WebhookVerifier, resolver: Optional[TransactionResolver] = None):
        self.verifier = verifier
        self.resolver = resolver or TransactionResolver()

    def handle(self, body: bytes, signature: Optional[str]) -> WebhookOutcome:
        self.verifier.verify(body, signature)
        payload = self._parse(body)

        event = payload['event']
        data = payload['data']
        reference = data.get('reference')

        if event not in HANDLED_EVENTS:
            logger.info("webhook.ignored", webhook_event=event, reference=reference)
            self._log(payload, WebhookDelivery.Outcome.IGNORED)
            return WebhookOutcome(event=event, outcome=WebhookDelivery.Outcome.IGNORED, reference=reference)

        # The event name is the verdict; data.status may lag behind it.
        result = replace(ChargeResult.from_payload(data), status=HANDLED_EVENTS[event])
        if result.status == SUCCESS:
            try:
                result.check_amounts()
            except ValueError as exc:
                logger.error("webhook.unusable_amount", webhook_event=event, reference=reference, error=str(exc))
                raise MalformedWebhook(f"Webhook amount is not usable: {exc}") from exc

        try:
            txn = self.resolver.resolve(reference)
        except TransactionNotFound:
            logger.error("webhook.transaction_not_found", webhook_event=event, reference=reference)
            self._log(payload, WebhookDelivery.Outcome.NOT_FOUND)
            raise

        try:
            row = None if txn.is_terminal else apply_charge_result(txn, result, source='webhook')
        except AmountMismatch:
            self._log(payload, WebhookDelivery.Outcome.AMOUNT_MISMATCH, txn)
            raise

        if row is None:
            logger.info(
                "webhook.duplicate",
                webhook_event=event,
                reference=reference,
                transaction_id=txn.pk,
                current_status=txn.status,
            )
            self._log(payload, WebhookDelivery.Outcome.DUPLICATE, txn)
            raise DuplicateWebhook()

        self._log(payload, WebhookDelivery.Outcome.PROCESSED, row)
        return WebhookOutcome(
            event=event,
            outcome=WebhookDelivery.Outcome.PROCESSED,
            reference=reference,
            transaction_id=row.pk,
        )

    @staticmethod
    def _parse(body: bytes) -> Dict[str, Any]:
        try:
            payload = json.loads(body.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise MalformedWebhook("Webhook body is not valid JSON")

        if not isinstance(payload, dict) or not payload.get('event'):
            raise MalformedWebhook("Webhook body has no event")
        if not isinstance(payload['event'], str):
            raise MalformedWebhook("Webhook event must be a string")
        data = payload.get('data')
        if not isinstance(data, dict):
            raise MalformedWebhook("Webhook body has no data object")
        if payload['event'] in HANDLED_EVENTS and not data.get('reference'):
            raise MalformedWebhook("Webhook data has no reference")
        if data.get('reference') is not None and not isinstance(data['reference'], str):
            raise MalformedWebhook("Webhook reference must be a string")
        return payload

    @staticmethod
    def _log(payload: Dict[str, Any], outcome: str, txn: Optional[SavingsTransaction] = None) -> None:
        WebhookDelivery.objects.create(
            transaction=txn,
            event=str(payload.get('event', ''))[:50],
            reference=str(payload.get('data', {}).get('reference') or '')[:100],
            payload=payload,
            outcome=outcome,
        )


class VerifyPaymentHandler:
    """
    Ask the gateway about a reference and settle the ledger if it can

    Used by the verify endpoint and the stale-pending sweep. Never
    charges; only queries.
    """

    def __init__(self, gateway: PaystackGateway, resolver: Optional[TransactionResolver] = None):
        self.gateway = gateway
        self.resolver = resolver or TransactionResolver()

    def handle(self, reference: Optional[str]) -> Dict[str, Any]:
        if not reference:
            raise ValidationError("Reference is required")

        txn = self.resolver.resolve(reference)
        result = self.gateway.verify(txn.lookup_reference)

        if result.is_terminal and not txn.is_terminal:
            try:
                apply_charge_result(txn, result, source='verify')
            except AmountMismatch:
                # Logged by the amount check; the record stays pending.
                pass
            txn.refresh_from_db()

        settled = result.settled_amount
        fees = result.settled_fees
        return {
            'reference': txn.lookup_reference,
            'status': result.raw_status or result.status,
            'amount': str(settled.amount) if settled else None,
            'currency': result.currency,
            'paid_at': result.paid_at.isoformat() if result.paid_at else None,
            'channel': result.channel,
            'gateway_response': result.gateway_response,
            'fees': str(fees.amount) if fees else None,
            'database_status': txn.status,
            'transaction_id': txn.pk,
        }

"""Notification dispatch for ledger outcomes.

Best-effort: every function here logs its failures and reports them
through the return value. Nothing is raised back to the caller, so a
notification problem can never undo or fail a settled transaction.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction  # type: ignore

from .models import Notification

if TYPE_CHECKING:  # pragma: no cover
    from apps.finances.models import SavingsTransaction

logger = logging.getLogger(__name__)


# ============================================================================
# TEMPLATES
# ============================================================================

def _format_amount(amount: Decimal) -> str:
    return f"{Decimal(amount):.2f}"


def render_transaction_notification(txn: "SavingsTransaction") -> dict | None:
    """Title, message, kind, priority and metadata for a terminal transaction."""
    from apps.finances.models import SavingsTransaction

    details = txn.details
    reference = txn.lookup_reference
    metadata = {
        "transaction_id": txn.pk,
        "amount": _format_amount(txn.amount),
        "reference": reference,
        "payment_method": txn.payment_method,
        "network": details.network,
    }

    if txn.status == SavingsTransaction.Status.COMPLETED:
        return {
            "kind": Notification.Kind.PAYMENT_CONFIRMATION,
            "title": "Payment Confirmation",
            "message": (
                f"Your payment of GHS {_format_amount(txn.amount)} has been successfully processed. "
                f"Transaction reference: {reference}"
            ),
            "priority": Notification.Priority.NORMAL,
            "metadata": metadata,
        }

    if txn.status == SavingsTransaction.Status.FAILED:
        reason = details.failure_reason or "Payment failed"
        return {
            "kind": Notification.Kind.PAYMENT_FAILED,
            "title": "Payment Failed",
            "message": (
                f"Your payment of GHS {_format_amount(txn.amount)} has failed. "
                f"Reason: {reason}. Transaction reference: {reference}"
            ),
            "priority": Notification.Priority.HIGH,
            "metadata": {**metadata, "failure_reason": reason},
        }

    return None


# ============================================================================
# IN-APP NOTIFICATIONS
# ============================================================================

def notify_transaction_outcome(transaction_id: int) -> bool:
    """
    Create the in-app notification for a settled transaction.

    Returns:
        bool: True if a notification was created by this call
    """
    from apps.finances.models import SavingsTransaction

    try:
        txn = SavingsTransaction.objects.select_related("user").get(pk=transaction_id)
    except SavingsTransaction.DoesNotExist:
        logger.error(f"Cannot notify: transaction {transaction_id} does not exist")
        return False

    content = render_transaction_notification(txn)
    if content is None:
        logger.warning(f"Transaction {transaction_id} is still {txn.status}; nothing to notify")
        return False

    kind = content.pop("kind")
    try:
        with transaction.atomic():
            notification, created = Notification.objects.get_or_create(
                transaction=txn,
                kind=kind,
                defaults={"user": txn.user, **content},
            )
    except IntegrityError:
        # A concurrent run created it first.
        logger.info(f"Notification for transaction {transaction_id} already exists")
        return False
    except Exception as e:
        logger.error(f"Failed to create notification for transaction {transaction_id}: {e}", exc_info=True)
        return False

    if created:
        logger.info(f"In-app notification {notification.pk} created for transaction {transaction_id}")
    else:
        logger.info(f"Notification for transaction {transaction_id} already exists")
    return created

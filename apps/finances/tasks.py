"""Celery tasks for the ledger."""

from __future__ import annotations

from datetime import timedelta

import structlog
from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from .exceptions import PaymentError
from .models import SavingsTransaction
from .services import build_verify_handler

logger = structlog.get_logger(__name__)


# ============================================================================
# PERIODIC TASKS (Celery Beat)
# ============================================================================

@shared_task(name="finances.verify_stale_pending_transactions")
def verify_stale_pending_transactions(limit: int = 100) -> dict[str, int]:
    """
    Re-verify mobile-money deposits stuck in PENDING.

    Only queries the gateway; a terminal answer goes through the guarded
    transition like any webhook would. Nothing is charged again.

    Returns:
        dict: {"checked": ..., "settled": ..., "errors": ...}
    """
    minutes = int(getattr(settings, "PAYMENT_PENDING_SWEEP_MINUTES", 30))
    cutoff = timezone.now() - timedelta(minutes=minutes)
    stale = list(
        SavingsTransaction.objects.pending()
        .filter(
            payment_method=SavingsTransaction.Method.MOBILE_MONEY,
            transaction_type=SavingsTransaction.Type.DEPOSIT,
            created_at__lte=cutoff,
        )
        .order_by("created_at")[:limit]
    )

    handler = build_verify_handler()
    settled = errors = 0
    for txn in stale:
        try:
            result = handler.handle(txn.lookup_reference)
        except PaymentError as exc:
            errors += 1
            logger.warning(
                "sweep.verify_failed",
                transaction_id=txn.pk,
                reference=txn.lookup_reference,
                error=exc.message,
            )
            continue
        if result["database_status"] != SavingsTransaction.Status.PENDING:
            settled += 1

    logger.info("sweep.finished", checked=len(stale), settled=settled, errors=errors)
    return {"checked": len(stale), "settled": settled, "errors": errors}

"""
Applying a gateway verdict to the ledger

Every producer of a terminal status (the initiator's immediate response,
webhooks and the verify endpoint) goes through ``apply_charge_result``,
so the guarded transition is the only place a race can be decided.
"""

from decimal import Decimal

import structlog

from shared.application.uow import DjangoUnitOfWork
from apps.finances.domain.events import TransactionCompleted, TransactionFailed
from apps.finances.domain.payment_details import PaymentDetails
from apps.finances.exceptions import AmountMismatch
from apps.finances.models import SavingsTransaction
from apps.finances.paystack_service import FAILED, SUCCESS, ChargeResult

logger = structlog.get_logger(__name__)

AMOUNT_TOLERANCE = Decimal('0.01')


def check_settled_amount(txn: SavingsTransaction, result: ChargeResult) -> None:
    """Refuse to complete a transaction the gateway settled for another amount."""
    if result.status != SUCCESS:
        return
    settled = result.settled_amount
    if settled is None:
        return
    if abs(settled.amount - txn.amount) <= AMOUNT_TOLERANCE:
        return

    logger.error(
        "transaction.amount_mismatch",
        transaction_id=txn.pk,
        reference=txn.lookup_reference,
        expected=str(txn.amount),
        reported=str(settled.amount),
    )
    SavingsTransaction.objects.record_pending_details(
        txn.pk,
        PaymentDetails(
            reported_amount=settled.amount,
            provider_id=result.provider_id,
            charge_status=result.raw_status or None,
            gateway_response=result.gateway_response,
        ),
    )
    raise AmountMismatch(
        f"Gateway settled {settled} but the transaction is for {txn.amount}"
    )


def apply_charge_result(txn: SavingsTransaction, result: ChargeResult, *, source: str):
    """
    Move ``txn`` to the terminal status reported by ``result``

    Returns the updated row, or None when another producer already
    settled the transaction. Domain events are published only for the
    winning call and only after commit.

    Raises:
        AmountMismatch: settled amount differs from the ledger amount
    """
    if not result.is_terminal:
        raise ValueError("Only terminal gateway results can be applied")

    check_settled_amount(txn, result)

    to_status = (
        SavingsTransaction.Status.COMPLETED if result.status == SUCCESS
        else SavingsTransaction.Status.FAILED
    )
    details = result.to_details()

    with DjangoUnitOfWork() as uow:
        row = SavingsTransaction.objects.transition(
            txn.pk,
            to_status,
            details,
            transaction_reference=result.reference,
        )
        if row is None:
            logger.info(
                "transaction.already_terminal",
                transaction_id=txn.pk,
                requested_status=to_status,
                source=source,
            )
            return None
        uow.add_event(_event_for(row, details))

    logger.info(
        "transaction.transitioned",
        transaction_id=row.pk,
        reference=row.lookup_reference,
        status=row.status,
        source=source,
    )
    return row


def declined_result(reference: str, reason: str) -> ChargeResult:
    """Terminal failure built from a definitive gateway error."""
    return ChargeResult(
        status=FAILED,
        raw_status=FAILED,
        reference=reference,
        gateway_response=reason,
        message=reason,
    )


def _event_for(row: SavingsTransaction, details: PaymentDetails):
    reference = row.lookup_reference
    if row.status == SavingsTransaction.Status.COMPLETED:
        return TransactionCompleted(
            aggregate_id=row.pk,
            transaction_id=row.pk,
            user_id=row.user_id,
            amount=row.amount,
            reference=reference,
        )
    return TransactionFailed(
        aggregate_id=row.pk,
        transaction_id=row.pk,
        user_id=row.user_id,
        amount=row.amount,
        reference=reference,
        failure_reason=details.failure_reason,
    )

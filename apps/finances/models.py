"""Ledger models for member contributions."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models, transaction  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .domain.payment_details import PaymentDetails


class SavingsTransactionQuerySet(models.QuerySet):
    def pending(self):
        return self.filter(status=SavingsTransaction.Status.PENDING)

    def for_user(self, user):
        return self.filter(user=user)


class SavingsTransactionManager(models.Manager.from_queryset(SavingsTransactionQuerySet)):  # type: ignore
    """Owns every status change of a ledger transaction."""

    def transition(
        self,
        pk: int,
        to_status: str,
        details: PaymentDetails | None = None,
        transaction_reference: str | None = None,
    ):
        """Move a pending transaction to a terminal status.

        The status change is a single conditional UPDATE guarded on
        ``status = pending``, so only one caller can ever win. Returns
        the updated row, or ``None`` when the transaction was no longer
        pending; in that case nothing is merged.
        """
        if to_status not in SavingsTransaction.TERMINAL_STATUSES:
            raise ValueError(f"Cannot transition to {to_status!r}")

        with transaction.atomic():
            updated = self.filter(pk=pk, status=SavingsTransaction.Status.PENDING).update(
                status=to_status,
                updated_at=timezone.now(),
            )
            if not updated:
                return None

            # The UPDATE above holds the row lock until commit.
            row = self.get(pk=pk)
            update_fields = ["payment_details"]
            if row.adopt_reference(transaction_reference):
                update_fields.append("transaction_reference")
            if details is not None:
                row.payment_details = row.details.merge(details).to_json()
            row.save(update_fields=update_fields)
            return row

    def record_pending_details(self, pk: int, details: PaymentDetails, transaction_reference: str | None = None):
        """Merge provider facts into a transaction that is still pending.

        Returns ``None`` when the transaction already reached a terminal
        status. ``transaction_reference`` is only written while it is
        still unset or equal to ``reference_id``.
        """
        with transaction.atomic():
            row = self.select_for_update().filter(pk=pk, status=SavingsTransaction.Status.PENDING).first()
            if row is None:
                return None
            update_fields = ["payment_details", "updated_at"]
            if row.adopt_reference(transaction_reference):
                update_fields.append("transaction_reference")
            row.payment_details = row.details.merge(details).to_json()
            row.save(update_fields=update_fields)
            return row


class SavingsTransaction(models.Model):
    """A single movement on a member's savings ledger."""

    class Type(models.TextChoices):
        DEPOSIT = "deposit", _("Deposit")
        CONTROLLER = "controller", _("Controller deduction")
        INTEREST = "interest", _("Interest")
        WITHDRAWAL = "withdrawal", _("Withdrawal")

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        COMPLETED = "completed", _("Completed")
        FAILED = "failed", _("Failed")

    class Method(models.TextChoices):
        MOBILE_MONEY = "mobile_money", _("Mobile money")
        BANK = "bank", _("Bank transfer")
        PAYROLL = "payroll", _("Payroll deduction")

    TERMINAL_STATUSES = (Status.COMPLETED, Status.FAILED)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="savings_transactions",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    transaction_type = models.CharField(max_length=20, choices=Type.choices, default=Type.DEPOSIT)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True)
    payment_method = models.CharField(max_length=20, choices=Method.choices, default=Method.MOBILE_MONEY)
    reference_id = models.CharField(max_length=64, unique=True)
    transaction_reference = models.CharField(max_length=100, unique=True, null=True, blank=True)
    payment_details = models.JSONField(default=dict, blank=True)
    description = models.CharField(max_length=255, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = SavingsTransactionManager()

    class Meta:
        verbose_name = _("Savings transaction")
        verbose_name_plural = _("Savings transactions")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "status"], name="finances_sa_user_id_5d1c0e_idx"),
            models.Index(fields=["status", "created_at"], name="finances_sa_status_8a3f21_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.reference_id} {self.transaction_type} {self.amount} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    @property
    def details(self) -> PaymentDetails:
        return PaymentDetails.from_json(self.payment_details)

    @property
    def lookup_reference(self) -> str:
        return self.transaction_reference or self.reference_id

    def adopt_reference(self, reference: str | None) -> bool:
        """Take the provider reference once; it is authoritative afterwards."""
        if not reference or reference == self.transaction_reference:
            return False
        if self.transaction_reference not in (None, "", self.reference_id):
            return False
        self.transaction_reference = reference
        return True


class WebhookDelivery(models.Model):
    """Audit log of authenticated webhooks received from the gateway."""

    class Outcome(models.TextChoices):
        PROCESSED = "processed", _("Processed")
        DUPLICATE = "duplicate", _("Duplicate")
        IGNORED = "ignored", _("Ignored")
        NOT_FOUND = "not_found", _("Transaction not found")
        AMOUNT_MISMATCH = "amount_mismatch", _("Amount mismatch")

    transaction = models.ForeignKey(
        SavingsTransaction,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="webhook_deliveries",
    )
    event = models.CharField(max_length=50)
    reference = models.CharField(max_length=100, blank=True, db_index=True)
    payload = models.JSONField()
    outcome = models.CharField(max_length=20, choices=Outcome.choices)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Webhook delivery")
        verbose_name_plural = _("Webhook deliveries")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.event} {self.reference} ({self.outcome})"

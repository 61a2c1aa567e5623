"""Notification model.

A user-facing message about the outcome of a ledger transaction. At most
one notification exists per (transaction, kind), which makes re-running
the dispatcher harmless.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Notification(models.Model):
    """A message sent to a user about some event."""

    class Kind(models.TextChoices):
        PAYMENT_CONFIRMATION = "payment_confirmation", _("Payment confirmation")
        PAYMENT_FAILED = "payment_failed", _("Payment failed")
        GENERAL = "general", _("General")

    class Priority(models.TextChoices):
        NORMAL = "normal", _("Normal")
        HIGH = "high", _("High")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications'
    )
    transaction = models.ForeignKey(
        'finances.SavingsTransaction',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='notifications',
    )
    kind = models.CharField(max_length=32, choices=Kind.choices, default=Kind.GENERAL)
    title = models.CharField(max_length=255)
    message = models.TextField()
    metadata = models.JSONField(default=dict, blank=True)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.NORMAL)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['transaction', 'kind'],
                name='unique_notification_per_transaction_kind',
            ),
        ]

    def __str__(self) -> str:
        return f"Notification to {self.user_id}: {self.title}"

"""Celery tasks for notifications."""

from __future__ import annotations

from celery import shared_task  # type: ignore

from .services import notify_transaction_outcome


@shared_task(name="notifications.send_transaction_notification")
def send_transaction_notification(transaction_id: int) -> bool:
    """Write the outcome notification for a settled transaction."""
    return notify_transaction_outcome(transaction_id)

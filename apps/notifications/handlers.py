"""Message-bus handlers that turn ledger events into notifications."""

from __future__ import annotations

import logging

from shared.application.message_bus import message_bus

logger = logging.getLogger(__name__)


def enqueue_transaction_notification(event) -> None:  # type: ignore
    from .tasks import send_transaction_notification

    logger.debug(f"Queueing notification for transaction {event.transaction_id}")
    send_transaction_notification.delay(event.transaction_id)


def register_handlers() -> None:
    from apps.finances.domain.events import TransactionCompleted, TransactionFailed

    message_bus.register_event_handler(TransactionCompleted, enqueue_transaction_notification)
    message_bus.register_event_handler(TransactionFailed, enqueue_transaction_notification)

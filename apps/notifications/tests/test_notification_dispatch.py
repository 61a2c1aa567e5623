"""Tests for transaction outcome notifications."""

from __future__ import annotations

from decimal import Decimal
from unittest import mock

import pytest

from apps.finances.domain.events import TransactionCompleted
from apps.finances.domain.payment_details import PaymentDetails
from apps.finances.models import SavingsTransaction
from apps.notifications.models import Notification
from apps.notifications.services import notify_transaction_outcome
from apps.users.models import User
from shared.application.message_bus import message_bus


@pytest.fixture
def member():
    return User.objects.create_user(email="esi@example.com", password="pass12345")


def _settled(member, status, **details):
    txn = SavingsTransaction.objects.create(
        user=member,
        amount=Decimal("75.50"),
        reference_id=f"TEST_{status}_XYZ123",
        payment_details=PaymentDetails(phone="233241234567", network="MTN", network_code="mtn").to_json(),
    )
    SavingsTransaction.objects.transition(txn.pk, status, PaymentDetails(**details))
    return SavingsTransaction.objects.get(pk=txn.pk)


@pytest.mark.django_db
def test_completed_transaction_gets_one_confirmation(member):
    txn = _settled(member, SavingsTransaction.Status.COMPLETED)

    assert notify_transaction_outcome(txn.pk) is True
    assert notify_transaction_outcome(txn.pk) is False

    notification = Notification.objects.get()
    assert notification.user == member
    assert notification.kind == Notification.Kind.PAYMENT_CONFIRMATION
    assert notification.title == "Payment Confirmation"
    assert notification.message == (
        "Your payment of GHS 75.50 has been successfully processed. "
        "Transaction reference: TEST_completed_XYZ123"
    )
    assert notification.metadata == {
        "transaction_id": txn.pk,
        "amount": "75.50",
        "reference": "TEST_completed_XYZ123",
        "payment_method": "mobile_money",
        "network": "MTN",
    }


@pytest.mark.django_db
def test_failed_transaction_notification_carries_reason(member):
    txn = _settled(member, SavingsTransaction.Status.FAILED, failure_reason="Insufficient funds")

    assert notify_transaction_outcome(txn.pk) is True

    notification = Notification.objects.get()
    assert notification.kind == Notification.Kind.PAYMENT_FAILED
    assert notification.priority == Notification.Priority.HIGH
    assert "Reason: Insufficient funds" in notification.message
    assert notification.metadata["failure_reason"] == "Insufficient funds"


@pytest.mark.django_db
def test_pending_transaction_is_not_notified(member):
    txn = SavingsTransaction.objects.create(user=member, amount=Decimal("10.00"), reference_id="TEST_P_1")

    assert notify_transaction_outcome(txn.pk) is False
    assert not Notification.objects.exists()


@pytest.mark.django_db
def test_unknown_transaction_is_reported_not_raised():
    assert notify_transaction_outcome(424242) is False


@pytest.mark.django_db
def test_storage_errors_are_swallowed(member):
    txn = _settled(member, SavingsTransaction.Status.COMPLETED)

    with mock.patch.object(Notification.objects, "get_or_create", side_effect=RuntimeError("db down")):
        assert notify_transaction_outcome(txn.pk) is False


@pytest.mark.django_db
def test_bus_handler_failure_does_not_propagate(member):
    txn = _settled(member, SavingsTransaction.Status.COMPLETED)
    event = TransactionCompleted(
        transaction_id=txn.pk,
        user_id=member.pk,
        amount=txn.amount,
        reference=txn.reference_id,
    )

    with mock.patch(
        "apps.notifications.tasks.send_transaction_notification.delay",
        side_effect=ConnectionError("broker down"),
    ):
        message_bus.publish_events([event])

    assert not Notification.objects.exists()


@pytest.mark.django_db
def test_bus_event_creates_notification(member):
    txn = _settled(member, SavingsTransaction.Status.COMPLETED)
    event = TransactionCompleted(
        transaction_id=txn.pk,
        user_id=member.pk,
        amount=txn.amount,
        reference=txn.reference_id,
    )

    message_bus.publish_events([event])

    assert Notification.objects.filter(transaction=txn).count() == 1

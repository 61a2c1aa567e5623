"""Tests for the storage-level guarded transition and the reference resolver."""

from __future__ import annotations

from decimal import Decimal

import pytest

from apps.finances.application.reconciliation import TransactionResolver
from apps.finances.domain.payment_details import PaymentDetails
from apps.finances.exceptions import TransactionNotFound
from apps.finances.models import SavingsTransaction
from apps.users.models import User


@pytest.fixture
def member():
    return User.objects.create_user(email="kofi@example.com", password="pass12345")


@pytest.fixture
def pending(member):
    return SavingsTransaction.objects.create(
        user=member,
        amount=Decimal("50.00"),
        reference_id="TEST_1_AAAAAA",
        payment_details=PaymentDetails(phone="233241234567", network="MTN", network_code="mtn").to_json(),
    )


@pytest.mark.django_db
def test_first_transition_wins_and_merges(pending):
    row = SavingsTransaction.objects.transition(
        pending.pk,
        SavingsTransaction.Status.COMPLETED,
        PaymentDetails(charged_amount=Decimal("50.00"), phone="233200000000"),
        transaction_reference="TEST_1_AAAAAA",
    )

    assert row is not None
    assert row.status == SavingsTransaction.Status.COMPLETED
    assert row.transaction_reference == "TEST_1_AAAAAA"
    assert row.details.charged_amount == Decimal("50.00")
    assert row.details.phone == "233241234567"


@pytest.mark.django_db
def test_terminal_transaction_is_not_touched_again(pending):
    SavingsTransaction.objects.transition(
        pending.pk, SavingsTransaction.Status.COMPLETED, PaymentDetails(gateway_response="Approved")
    )
    before = SavingsTransaction.objects.get(pk=pending.pk)

    row = SavingsTransaction.objects.transition(
        pending.pk, SavingsTransaction.Status.FAILED, PaymentDetails(failure_reason="Declined")
    )

    after = SavingsTransaction.objects.get(pk=pending.pk)
    assert row is None
    assert after.status == SavingsTransaction.Status.COMPLETED
    assert after.payment_details == before.payment_details


@pytest.mark.django_db
def test_transition_back_to_pending_is_refused(pending):
    with pytest.raises(ValueError):
        SavingsTransaction.objects.transition(pending.pk, SavingsTransaction.Status.PENDING)


@pytest.mark.django_db
def test_pending_details_are_not_recorded_after_settlement(pending):
    SavingsTransaction.objects.transition(pending.pk, SavingsTransaction.Status.FAILED)

    assert SavingsTransaction.objects.record_pending_details(pending.pk, PaymentDetails(gateway_error="x")) is None


@pytest.mark.django_db
def test_provider_reference_is_adopted_only_once(pending):
    SavingsTransaction.objects.record_pending_details(pending.pk, PaymentDetails(), transaction_reference="PSK_1")
    SavingsTransaction.objects.record_pending_details(pending.pk, PaymentDetails(), transaction_reference="PSK_2")

    pending.refresh_from_db()
    assert pending.transaction_reference == "PSK_1"
    assert pending.lookup_reference == "PSK_1"


@pytest.mark.django_db
def test_resolver_prefers_transaction_reference(member, pending):
    pending.transaction_reference = "SHARED"
    pending.save(update_fields=["transaction_reference"])
    other = SavingsTransaction.objects.create(user=member, amount=Decimal("5.00"), reference_id="SHARED")

    resolver = TransactionResolver()

    assert resolver.resolve("SHARED") == pending
    assert resolver.resolve(pending.reference_id) == pending
    assert resolver.find(other.reference_id) == pending
    with pytest.raises(TransactionNotFound):
        resolver.resolve("UNKNOWN")
    assert resolver.find("") is None

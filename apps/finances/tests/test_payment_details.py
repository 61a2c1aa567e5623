"""Tests for the payment details merge rules."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from apps.finances.domain.payment_details import PaymentDetails


def test_write_once_fields_are_never_overwritten():
    seeded = PaymentDetails(phone="233241234567", network="MTN", network_code="mtn")

    merged = seeded.merge(PaymentDetails(phone="233201111111", network="VODAFONE", provider_id="99"))

    assert merged.phone == "233241234567"
    assert merged.network == "MTN"
    assert merged.provider_id == "99"


def test_none_never_erases_and_last_writer_wins():
    first = PaymentDetails(gateway_response="Pending", channel="mobile_money")

    merged = first.merge(PaymentDetails(gateway_response="Approved", channel=None))

    assert merged.gateway_response == "Approved"
    assert merged.channel == "mobile_money"


def test_json_round_trip_keeps_unknown_keys_and_types():
    stored = {
        "phone": "233241234567",
        "charged_amount": "50.00",
        "completed_at": "2026-01-05T10:00:00+00:00",
        "legacy_flag": True,
    }

    details = PaymentDetails.from_json(stored)

    assert details.charged_amount == Decimal("50.00")
    assert details.completed_at == datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)
    assert details.extra == {"legacy_flag": True}
    assert details.to_json() == stored


def test_merge_keeps_extra_from_both_sides():
    merged = PaymentDetails(extra={"a": 1}).merge(PaymentDetails(extra={"b": 2}))

    assert merged.extra == {"a": 1, "b": 2}

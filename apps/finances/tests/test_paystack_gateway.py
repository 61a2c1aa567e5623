"""Tests for the Paystack gateway adapter."""

from __future__ import annotations

from decimal import Decimal
from unittest import mock

import pytest
import requests

from apps.finances.conf import PaystackConfig
from apps.finances.exceptions import GatewayUnavailable
from apps.finances.paystack_service import FAILED, PENDING, SUCCESS, ChargeRequest, ChargeResult, PaystackGateway
from shared.domain.value_objects import Money

CONFIG = PaystackConfig(secret_key="sk_test_gateway_secret", base_url="https://paystack.test", timeout_seconds=3)


def _response(body, status_code=200):
    response = mock.Mock(status_code=status_code)
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


def _request(amount="50.00"):
    return ChargeRequest(
        amount=Money(Decimal(amount)),
        email="ama@example.com",
        phone="233241234567",
        network_code="mtn",
        reference="TEST_1_ABCDEF",
        metadata={"user_id": 1, "transaction_id": 7},
    )


def test_charge_sends_minor_units_and_mobile_money_block():
    session = mock.Mock()
    session.request.return_value = _response(
        {"status": True, "message": "Charge attempted", "data": {"reference": "TEST_1_ABCDEF", "status": "pay_offline"}}
    )

    result = PaystackGateway(CONFIG, session=session).charge(_request("50.00"))

    method, url = session.request.call_args.args
    kwargs = session.request.call_args.kwargs
    assert method == "POST"
    assert url == "https://paystack.test/charge"
    assert kwargs["timeout"] == 3
    assert kwargs["headers"]["Authorization"] == "Bearer sk_test_gateway_secret"
    assert kwargs["json"]["amount"] == 5000
    assert kwargs["json"]["currency"] == "GHS"
    assert kwargs["json"]["mobile_money"] == {"phone": "233241234567", "provider": "mtn"}
    assert kwargs["json"]["metadata"]["transaction_id"] == 7
    assert result.status == PENDING
    assert result.raw_status == "pay_offline"


def test_sub_cent_amounts_round_half_up():
    session = mock.Mock()
    session.request.return_value = _response({"status": True, "data": {"status": "send_otp"}})

    PaystackGateway(CONFIG, session=session).charge(_request("10.005"))

    assert session.request.call_args.kwargs["json"]["amount"] == 1001


def test_timeout_surfaces_as_recoverable_unavailability():
    session = mock.Mock()
    session.request.side_effect = requests.Timeout()

    with pytest.raises(GatewayUnavailable) as excinfo:
        PaystackGateway(CONFIG, session=session).charge(_request())

    assert excinfo.value.definitive is False
    assert excinfo.value.status_code == 502


def test_server_error_with_failed_charge_is_definitive():
    session = mock.Mock()
    session.request.return_value = _response(
        {"status": False, "message": "Charge failed", "data": {"status": "failed"}},
        status_code=500,
    )

    with pytest.raises(GatewayUnavailable) as excinfo:
        PaystackGateway(CONFIG, session=session).charge(_request())

    assert excinfo.value.definitive is True


def test_server_error_without_body_is_not_definitive():
    session = mock.Mock()
    session.request.return_value = _response(ValueError("no json"), status_code=503)

    with pytest.raises(GatewayUnavailable) as excinfo:
        PaystackGateway(CONFIG, session=session).charge(_request())

    assert excinfo.value.definitive is False


def test_rejected_charge_request_is_a_failed_result():
    session = mock.Mock()
    session.request.return_value = _response({"status": False, "message": "Invalid phone"}, status_code=400)

    result = PaystackGateway(CONFIG, session=session).charge(_request())

    assert result.status == FAILED
    assert result.to_details().failure_reason == "Invalid phone"


def test_success_payload_converts_minor_units():
    result = ChargeResult.from_payload(
        {
            "id": 4099260516,
            "reference": "R1",
            "status": "success",
            "amount": 5000,
            "fees": 75,
            "currency": "GHS",
            "channel": "mobile_money",
            "gateway_response": "Approved",
            "paid_at": "2026-01-05T10:00:00.000Z",
            "authorization": {"authorization_code": "AUTH_x", "last4": "4567", "bank": "MTN"},
        }
    )

    details = result.to_details()

    assert result.status == SUCCESS
    assert result.settled_amount == Money(Decimal("50.00"))
    assert details.charged_amount == Decimal("50.00")
    assert details.fees == Decimal("0.75")
    assert details.provider_id == "4099260516"
    assert details.authorization_code == "AUTH_x"
    assert details.completed_at.year == 2026


def test_verify_unknown_reference_is_pending():
    session = mock.Mock()
    session.request.return_value = _response({"status": False, "message": "Transaction reference not found"}, 400)

    result = PaystackGateway(CONFIG, session=session).verify("R404")

    assert result.status == PENDING
    assert session.request.call_args.args == ("GET", "https://paystack.test/transaction/verify/R404")


@pytest.mark.parametrize("data", [["x"], "queued"])
def test_non_object_data_is_an_invalid_response(data):
    session = mock.Mock()
    session.request.return_value = _response({"status": True, "data": data})

    with pytest.raises(GatewayUnavailable) as excinfo:
        PaystackGateway(CONFIG, session=session).charge(_request())

    assert excinfo.value.message == "Invalid response from payment gateway"
    assert excinfo.value.definitive is False


def test_verify_with_negative_amount_is_an_invalid_response():
    session = mock.Mock()
    session.request.return_value = _response(
        {"status": True, "data": {"reference": "R1", "status": "success", "amount": -5000}}
    )

    with pytest.raises(GatewayUnavailable):
        PaystackGateway(CONFIG, session=session).verify("R1")


def test_currency_is_upper_cased():
    result = ChargeResult.from_payload({"status": "success", "amount": 5000, "fees": 75, "currency": "ghs"})

    result.check_amounts()
    assert result.currency == "GHS"
    assert result.settled_fees == Money(Decimal("0.75"))


def test_failed_result_never_builds_money():
    result = ChargeResult.from_payload(
        {"status": "failed", "amount": -5000, "fees": -1, "currency": "usd", "gateway_response": "Declined"}
    )

    details = result.to_details()

    assert result.status == FAILED
    assert details.failure_reason == "Declined"
    with pytest.raises(ValueError):
        result.check_amounts()

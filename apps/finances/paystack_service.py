"""
Paystack gateway adapter.

Translates a normalized charge request into Paystack's mobile-money
charge call and parses the gateway's answers (charge, verify and
webhook ``data`` objects share one shape) into ``ChargeResult``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import requests
import structlog

from shared.domain.value_objects import Money

from .conf import PaystackConfig
from .domain.payment_details import PaymentDetails
from .exceptions import GatewayUnavailable

logger = structlog.get_logger(__name__)

SUCCESS = "success"
FAILED = "failed"
PENDING = "pending"

_TERMINAL_FAILURES = {"failed", "reversed"}


@dataclass(frozen=True)
class ChargeRequest:
    amount: Money
    email: str
    phone: str
    network_code: str
    reference: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ChargeResult:
    """Gateway answer about one charge.

    ``status`` is one of ``success``, ``failed`` or ``pending``; the
    provider's own wording is kept in ``raw_status``.
    """

    status: str
    raw_status: str = ""
    reference: str | None = None
    provider_id: str | None = None
    amount_minor: int | None = None
    fees_minor: int | None = None
    currency: str | None = None
    channel: str | None = None
    gateway_response: str | None = None
    display_text: str | None = None
    message: str | None = None
    paid_at: datetime | None = None
    authorization: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.status in (SUCCESS, FAILED)

    @property
    def settled_amount(self) -> Money | None:
        if self.amount_minor is None:
            return None
        return Money.from_minor_units(self.amount_minor, self.currency or "GHS")

    @property
    def settled_fees(self) -> Money | None:
        if self.fees_minor is None:
            return None
        return Money.from_minor_units(self.fees_minor, self.currency or "GHS")

    def check_amounts(self) -> None:
        """Raise ValueError unless amount and fees are valid Money in the reported currency."""
        currency = self.currency or "GHS"
        for minor in (self.amount_minor, self.fees_minor):
            if minor is not None:
                Money.from_minor_units(minor, currency)

    @classmethod
    def from_payload(cls, data: dict[str, Any] | None, message: str | None = None) -> "ChargeResult":
        """Parse a charge ``data`` object; ValueError when it is not an object."""
        data = data or {}
        if not isinstance(data, dict):
            raise ValueError(f"Charge data must be an object, got {type(data).__name__}")
        currency = data.get("currency")
        raw_status = str(data.get("status") or "").lower()
        if raw_status == SUCCESS:
            status = SUCCESS
        elif raw_status in _TERMINAL_FAILURES:
            status = FAILED
        else:
            status = PENDING

        authorization = data.get("authorization") or {}
        if not isinstance(authorization, dict):
            authorization = {}

        provider_id = data.get("id")
        return cls(
            status=status,
            raw_status=raw_status,
            reference=data.get("reference") or None,
            provider_id=str(provider_id) if provider_id is not None else None,
            amount_minor=_to_int(data.get("amount")),
            fees_minor=_to_int(data.get("fees")),
            currency=str(currency).upper() if currency else None,
            channel=data.get("channel") or None,
            gateway_response=data.get("gateway_response") or None,
            display_text=data.get("display_text") or None,
            message=message,
            paid_at=_parse_timestamp(data.get("paid_at") or data.get("paidAt")),
            authorization=authorization,
        )

    def to_details(self) -> PaymentDetails:
        """Provider facts to merge into the ledger record."""
        details = PaymentDetails(
            provider_id=self.provider_id,
            provider_reference=self.reference,
            charge_status=self.raw_status or None,
            gateway_response=self.gateway_response,
            channel=self.channel,
            display_text=self.display_text,
            currency=self.currency,
            authorization_code=self.authorization.get("authorization_code") or None,
            last4=self.authorization.get("last4") or None,
            bank=self.authorization.get("bank") or None,
        )
        if self.status == SUCCESS:
            return PaymentDetails(
                charged_amount=self.settled_amount.amount if self.settled_amount else None,
                fees=self.settled_fees.amount if self.settled_fees else None,
                completed_at=self.paid_at or datetime.now(timezone.utc),
            ).merge(details)
        if self.status == FAILED:
            return PaymentDetails(
                failure_reason=self.gateway_response or self.message or "Payment failed",
                failed_at=datetime.now(timezone.utc),
            ).merge(details)
        return details


class PaystackGateway:
    """Thin client over the Paystack REST API."""

    def __init__(self, config: PaystackConfig, session: requests.Session | None = None):
        self.config = config
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.secret_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def charge(self, request: ChargeRequest) -> ChargeResult:
        payload = {
            "amount": request.amount.minor_units,
            "email": request.email,
            "currency": request.amount.currency,
            "reference": request.reference,
            "mobile_money": {
                "phone": request.phone,
                "provider": request.network_code,
            },
            "metadata": {
                **request.metadata,
                "custom_fields": [
                    {
                        "display_name": "Payment Type",
                        "variable_name": "payment_type",
                        "value": request.metadata.get("transaction_type", "deposit"),
                    },
                ],
            },
        }
        logger.info(
            "paystack.charge_requested",
            reference=request.reference,
            amount_minor=payload["amount"],
            provider=request.network_code,
        )
        body = self._send("POST", "/charge", reference=request.reference, json=payload)
        result = self._result_from(body, reference=request.reference)
        if body.get("status") is False and not result.is_terminal:
            # Paystack refused to attempt the charge.
            result = ChargeResult(
                status=FAILED,
                raw_status=FAILED,
                reference=result.reference or request.reference,
                gateway_response=result.gateway_response,
                message=body.get("message"),
            )
        return result

    def verify(self, reference: str) -> ChargeResult:
        body = self._send("GET", f"/transaction/verify/{reference}", reference=reference)
        if body.get("status") is False:
            # Unknown to Paystack or not yet attempted; nothing to settle.
            return ChargeResult(status=PENDING, reference=reference, message=body.get("message"))
        return self._result_from(body, reference=reference)

    @staticmethod
    def _result_from(body: dict[str, Any], *, reference: str) -> ChargeResult:
        try:
            result = ChargeResult.from_payload(body.get("data"), message=body.get("message"))
            result.check_amounts()
        except ValueError as exc:
            logger.warning("paystack.invalid_response", reference=reference, error=str(exc))
            raise GatewayUnavailable("Invalid response from payment gateway", reference=reference) from exc
        return result

    def _send(self, method: str, path: str, *, reference: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.config.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(),
                timeout=self.config.timeout_seconds,
                **kwargs,
            )
        except requests.Timeout as exc:
            logger.warning("paystack.timeout", reference=reference, path=path)
            raise GatewayUnavailable("Payment gateway timed out", reference=reference) from exc
        except requests.RequestException as exc:
            logger.warning("paystack.connection_error", reference=reference, path=path, error=str(exc))
            raise GatewayUnavailable("Payment gateway unreachable", reference=reference) from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 500:
            data = body.get("data") if isinstance(body, dict) else None
            definitive = isinstance(data, dict) and str(data.get("status", "")).lower() == FAILED
            logger.warning(
                "paystack.server_error",
                reference=reference,
                status_code=response.status_code,
                definitive=definitive,
            )
            message = body.get("message") if isinstance(body, dict) else None
            raise GatewayUnavailable(
                message or f"Payment gateway error ({response.status_code})",
                definitive=definitive,
                reference=reference,
            )

        if not isinstance(body, dict):
            logger.warning("paystack.invalid_response", reference=reference, status_code=response.status_code)
            raise GatewayUnavailable("Invalid response from payment gateway", reference=reference)

        return body


def _to_int(value: Any) -> int | None:
    if value in (None, ""):
        return None
    try:
        return int(Decimal(str(value)))
    except (ArithmeticError, ValueError):
        return None


def _parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None

"""Errors raised by the payments core.

Each error carries the HTTP status the API answers with, so views can
translate them without a lookup table.
"""

from __future__ import annotations


class PaymentError(Exception):
    status_code = 500
    default_message = "Payment processing error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PaymentError):
    status_code = 400
    default_message = "Invalid payment request"


class UserResolutionError(PaymentError):
    status_code = 400
    default_message = "User not found"


class GatewayUnavailable(PaymentError):
    """The gateway could not be reached or answered with a server error.

    ``definitive`` is set when the gateway did answer and its answer
    settles the charge as declined.
    """

    status_code = 502
    default_message = "Payment gateway unavailable"

    def __init__(self, message: str | None = None, *, definitive: bool = False, reference: str | None = None):
        super().__init__(message)
        self.definitive = definitive
        self.reference = reference


class SignatureInvalid(PaymentError):
    status_code = 401
    default_message = "Invalid signature"


class MalformedWebhook(PaymentError):
    status_code = 400
    default_message = "Malformed webhook payload"


class TransactionNotFound(PaymentError):
    status_code = 404
    default_message = "Transaction not found"


class DuplicateWebhook(PaymentError):
    """The transaction is already terminal; acknowledged as a no-op."""

    status_code = 200
    default_message = "Transaction already processed"


class AmountMismatch(PaymentError):
    """Settled amount disagrees with the ledger; acknowledged and left pending."""

    status_code = 200
    default_message = "Settled amount does not match the transaction"

"""Webhook signature verification."""

from __future__ import annotations

import hashlib
import hmac

import structlog

from .conf import PaystackConfig
from .exceptions import SignatureInvalid

logger = structlog.get_logger(__name__)

SIGNATURE_HEADER = "HTTP_X_PAYSTACK_SIGNATURE"
FALLBACK_SIGNATURE_HEADER = "HTTP_X_SIGNATURE"


def compute_signature(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha512).hexdigest()


class WebhookVerifier:
    """Authenticates webhook bodies with HMAC-SHA512.

    Without a usable secret the verifier rejects everything, unless the
    configuration explicitly allows unsigned webhooks (development only).
    """

    def __init__(self, config: PaystackConfig):
        self.secret = config.signing_secret
        self.allow_unsigned = config.allow_unsigned_webhooks

    def verify(self, body: bytes, signature: str | None) -> None:
        if self.secret:
            expected = compute_signature(body, self.secret)
            if not signature or not hmac.compare_digest(expected, signature.strip().lower()):
                logger.warning("webhook.signature_invalid", has_signature=bool(signature))
                raise SignatureInvalid()
            return

        if self.allow_unsigned:
            logger.warning("webhook.signature_skipped", reason="no webhook secret configured")
            return

        logger.error("webhook.signature_unconfigured")
        raise SignatureInvalid("Webhook signing secret is not configured")

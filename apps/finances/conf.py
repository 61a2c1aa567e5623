"""Paystack configuration.

Settings are read once into an immutable object that is handed to the
gateway adapter and the webhook verifier when they are built. Neither of
them looks at ``django.conf.settings`` while handling a request.
"""

from __future__ import annotations

from dataclasses import dataclass

from django.conf import settings  # type: ignore

DEFAULT_BASE_URL = "https://api.paystack.co"
DEFAULT_TIMEOUT_SECONDS = 5.0
MIN_SECRET_LENGTH = 10
PLACEHOLDER_MARKERS = ("your_", "changeme", "replace-me")


def is_usable_secret(secret: str | None) -> bool:
    """Empty, short or placeholder secrets count as not configured."""
    if not secret:
        return False
    if len(secret) <= MIN_SECRET_LENGTH:
        return False
    lowered = secret.lower()
    return not any(marker in lowered for marker in PLACEHOLDER_MARKERS)


@dataclass(frozen=True)
class PaystackConfig:
    secret_key: str = ""
    webhook_secret: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    currency: str = "GHS"
    allow_unsigned_webhooks: bool = False
    reference_prefix: str = "MOMO"
    email_domain: str = "payments.local"

    @property
    def signing_secret(self) -> str | None:
        """Secret used for webhook signatures, if one is usable.

        Paystack signs webhooks with the account secret key; a dedicated
        webhook secret takes precedence when configured.
        """
        for candidate in (self.webhook_secret, self.secret_key):
            if is_usable_secret(candidate):
                return candidate
        return None

    @classmethod
    def from_settings(cls) -> "PaystackConfig":
        debug = bool(getattr(settings, "DEBUG", False))
        return cls(
            secret_key=getattr(settings, "PAYSTACK_SECRET_KEY", "") or "",
            webhook_secret=getattr(settings, "PAYSTACK_WEBHOOK_SECRET", "") or "",
            base_url=(getattr(settings, "PAYSTACK_BASE_URL", "") or DEFAULT_BASE_URL).rstrip("/"),
            timeout_seconds=float(getattr(settings, "PAYSTACK_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)),
            currency=getattr(settings, "PAYSTACK_CURRENCY", "GHS"),
            # Unsigned webhooks are a development convenience only.
            allow_unsigned_webhooks=debug and bool(getattr(settings, "PAYSTACK_ALLOW_UNSIGNED_WEBHOOKS", False)),
            reference_prefix=getattr(settings, "PAYMENT_REFERENCE_PREFIX", "MOMO"),
            email_domain=getattr(settings, "PAYMENT_FALLBACK_EMAIL_DOMAIN", "payments.local"),
        )

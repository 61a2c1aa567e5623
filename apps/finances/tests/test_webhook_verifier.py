"""Tests for webhook signature verification."""

from __future__ import annotations

import pytest
from django.test import override_settings

from apps.finances.conf import PaystackConfig, is_usable_secret
from apps.finances.exceptions import SignatureInvalid
from apps.finances.webhooks import WebhookVerifier, compute_signature

SECRET = "sk_test_verifier_secret"
BODY = b'{"event":"charge.success","data":{"reference":"R1"}}'


def test_valid_signature_passes():
    verifier = WebhookVerifier(PaystackConfig(secret_key=SECRET))

    verifier.verify(BODY, compute_signature(BODY, SECRET))


def test_signature_over_a_different_body_is_rejected():
    verifier = WebhookVerifier(PaystackConfig(secret_key=SECRET))
    signature = compute_signature(BODY, SECRET)

    with pytest.raises(SignatureInvalid):
        verifier.verify(BODY.replace(b"R1", b"R2"), signature)


def test_missing_signature_is_rejected():
    verifier = WebhookVerifier(PaystackConfig(secret_key=SECRET))

    with pytest.raises(SignatureInvalid):
        verifier.verify(BODY, None)


def test_dedicated_webhook_secret_takes_precedence():
    config = PaystackConfig(secret_key=SECRET, webhook_secret="whsec_dedicated_secret")
    verifier = WebhookVerifier(config)

    verifier.verify(BODY, compute_signature(BODY, "whsec_dedicated_secret"))
    with pytest.raises(SignatureInvalid):
        verifier.verify(BODY, compute_signature(BODY, SECRET))


def test_fails_closed_without_a_secret():
    verifier = WebhookVerifier(PaystackConfig(secret_key=""))

    with pytest.raises(SignatureInvalid):
        verifier.verify(BODY, None)


def test_unsigned_allowed_only_when_configured():
    verifier = WebhookVerifier(PaystackConfig(secret_key="", allow_unsigned_webhooks=True))

    verifier.verify(BODY, None)


@pytest.mark.parametrize("secret", ["", "short", "sk_test_your_secret_here", "your_paystack_key"])
def test_placeholder_secrets_are_not_usable(secret):
    assert not is_usable_secret(secret)


@override_settings(DEBUG=False, PAYSTACK_ALLOW_UNSIGNED_WEBHOOKS=True)
def test_unsigned_flag_is_ignored_outside_debug():
    assert PaystackConfig.from_settings().allow_unsigned_webhooks is False


@override_settings(DEBUG=True, PAYSTACK_ALLOW_UNSIGNED_WEBHOOKS=True)
def test_unsigned_flag_is_honoured_in_debug():
    assert PaystackConfig.from_settings().allow_unsigned_webhooks is True

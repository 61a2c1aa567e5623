"""Wiring for the payment use cases.

Configuration is read here, at the edge, and injected into the gateway
adapter and the webhook verifier.
"""

from __future__ import annotations

import requests

from .application.initiation import InitiateDepositHandler
from .application.reconciliation import ReconcileWebhookHandler, VerifyPaymentHandler
from .conf import PaystackConfig
from .paystack_service import PaystackGateway
from .webhooks import WebhookVerifier


def build_gateway(config: PaystackConfig | None = None, session: requests.Session | None = None) -> PaystackGateway:
    return PaystackGateway(config or PaystackConfig.from_settings(), session=session)


def build_initiation_handler(config: PaystackConfig | None = None) -> InitiateDepositHandler:
    config = config or PaystackConfig.from_settings()
    return InitiateDepositHandler(gateway=build_gateway(config), config=config)


def build_webhook_handler(config: PaystackConfig | None = None) -> ReconcileWebhookHandler:
    return ReconcileWebhookHandler(verifier=WebhookVerifier(config or PaystackConfig.from_settings()))


def build_verify_handler(config: PaystackConfig | None = None) -> VerifyPaymentHandler:
    return VerifyPaymentHandler(gateway=build_gateway(config))

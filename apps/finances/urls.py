"""URL routing for the payment endpoints (mounted under ``/payments/``)."""

from __future__ import annotations

from django.urls import path, re_path  # type: ignore

from .views import InitiatePaymentView, PaystackWebhookView, VerifyPaymentView

app_name = "payments"

urlpatterns = [
    re_path(r"^initiate/?$", InitiatePaymentView.as_view(), name="initiate"),
    re_path(r"^webhook/?$", PaystackWebhookView.as_view(), name="webhook"),
    re_path(r"^verify/?$", VerifyPaymentView.as_view(), name="verify"),
    path("transaction/verify/<str:reference>", VerifyPaymentView.as_view(), name="verify-reference"),
]

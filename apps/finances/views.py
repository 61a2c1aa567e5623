"""API views for mobile-money payments.

``/payments/initiate`` and ``/payments/verify`` are DRF views. The
gateway webhook is a plain Django view: the signature is computed over
the raw request body, which must reach the verifier untouched.
"""

from __future__ import annotations

import structlog
from django.http import HttpRequest, JsonResponse  # type: ignore
from django.utils.decorators import method_decorator  # type: ignore
from django.views import View  # type: ignore
from django.views.decorators.csrf import csrf_exempt  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from .application.initiation import InitiateDepositCommand
from .exceptions import PaymentError
from .mobile_money import network_catalogue
from .models import SavingsTransaction
from .serializers import InitiatePaymentSerializer, SavingsTransactionSerializer
from .services import build_initiation_handler, build_verify_handler, build_webhook_handler
from .webhooks import FALLBACK_SIGNATURE_HEADER, SIGNATURE_HEADER

logger = structlog.get_logger(__name__)


def error_body(exc: PaymentError) -> dict:
    return {"status": "error", "message": exc.message}


class InitiatePaymentView(APIView):
    """Start a mobile-money deposit, or list the supported networks."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response({"status": "success", "networks": network_catalogue()})

    def post(self, request):
        serializer = InitiatePaymentSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"status": "error", "message": "Invalid payment request", "errors": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        data = serializer.validated_data
        metadata = data.get("metadata") or {}
        user_id = metadata.get("user_id")
        if not user_id and request.user.is_authenticated:
            user_id = request.user.pk

        command = InitiateDepositCommand(
            amount=data["amount"],
            phone=data["phone"],
            network=data["network"],
            user_id=user_id,
            email=metadata.get("email") or None,
            description=data.get("description", ""),
        )

        try:
            result = build_initiation_handler().handle(command)
        except PaymentError as exc:
            logger.info("payment.initiation_rejected", error=exc.__class__.__name__, message=exc.message)
            return Response(error_body(exc), status=exc.status_code)

        return Response({"status": "success", **result.to_dict()}, status=status.HTTP_200_OK)


class VerifyPaymentView(APIView):
    """Query the gateway for a reference and reconcile the ledger."""

    permission_classes = [permissions.AllowAny]

    def get(self, request, reference: str | None = None):
        reference = reference or request.query_params.get("reference")
        try:
            payload = build_verify_handler().handle(reference)
        except PaymentError as exc:
            return Response(error_body(exc), status=exc.status_code)
        return Response({"status": "success", "data": payload})


@method_decorator(csrf_exempt, name="dispatch")
class PaystackWebhookView(View):
    """Receives charge events from Paystack."""

    def get(self, request: HttpRequest):
        # Endpoint handshake
        challenge = request.GET.get("challenge")
        if challenge:
            return JsonResponse({"challenge": challenge})
        return JsonResponse({"status": "ok", "message": "Webhook endpoint is active"})

    def post(self, request: HttpRequest):
        signature = request.META.get(SIGNATURE_HEADER) or request.META.get(FALLBACK_SIGNATURE_HEADER)
        try:
            outcome = build_webhook_handler().handle(request.body, signature)
        except PaymentError as exc:
            if exc.status_code == 200:
                return JsonResponse({"status": "success", "message": exc.message})
            return JsonResponse(error_body(exc), status=exc.status_code)
        except Exception:
            logger.exception("webhook.processing_failed")
            return JsonResponse({"status": "error", "message": "Internal error"}, status=500)

        return JsonResponse(
            {
                "status": "success",
                "message": f"Webhook {outcome.outcome}",
                "reference": outcome.reference,
            }
        )


class SavingsTransactionViewSet(viewsets.ReadOnlyModelViewSet):
    """Read-only ledger feed for the authenticated member."""

    serializer_class = SavingsTransactionSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status", "transaction_type"]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = SavingsTransaction.objects.select_related("user")
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return qs
        return qs.for_user(user)

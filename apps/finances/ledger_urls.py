"""URL routing for the read-only ledger feed."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import SavingsTransactionViewSet

router = DefaultRouter()
router.register(r"", SavingsTransactionViewSet, basename="transaction")

urlpatterns = [
    path("", include(router.urls)),
]

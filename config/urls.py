"""URL configuration for the contributions payment service.

The `urlpatterns` list routes URLs to views. It includes the Django admin,
the gateway-facing payment endpoints and the versioned read APIs.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore

urlpatterns = [
    path('admin/', admin.site.urls),
    # Gateway-facing payment endpoints
    path('payments/', include('apps.finances.urls', namespace='payments')),
    # Read APIs, v1
    path('api/v1/transactions/', include('apps.finances.ledger_urls')),
    path('api/v1/notifications/', include('apps.notifications.urls')),
]

"""User resolution for payment initiation.

There is exactly one resolution policy: look the user up by primary
key, and only if that fails fall back to the email address. Callers
get a tagged result and branch on it once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import structlog
from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore

from .models import CustomUser

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Found:
    user: CustomUser
    matched_by: str


@dataclass(frozen=True)
class NotFound:
    user_id: Any
    email: str | None


UserLookup = Union[Found, NotFound]


def _by_id(user_id: Any) -> CustomUser | None:
    if user_id in (None, ""):
        return None
    try:
        return CustomUser.objects.filter(pk=user_id, is_active=True).first()
    except (ValueError, TypeError, DjangoValidationError):
        # Malformed ids are a miss, not an error.
        return None


def _by_email(email: str | None) -> CustomUser | None:
    if not email:
        return None
    return CustomUser.objects.filter(email__iexact=email.strip(), is_active=True).first()


def resolve_user(user_id: Any = None, email: str | None = None) -> UserLookup:
    """Resolve the owner of a payment: id first, then email."""
    user = _by_id(user_id)
    if user is not None:
        return Found(user=user, matched_by="id")

    user = _by_email(email)
    if user is not None:
        logger.warning(
            "user.resolved_by_email",
            requested_user_id=str(user_id) if user_id is not None else None,
            resolved_user_id=user.pk,
        )
        return Found(user=user, matched_by="email")

    logger.info("user.not_found", requested_user_id=str(user_id) if user_id is not None else None)
    return NotFound(user_id=user_id, email=email)

"""Tests for the single user resolution policy."""

from __future__ import annotations

import pytest

from apps.users.models import User
from apps.users.services import Found, NotFound, resolve_user


@pytest.fixture
def member():
    return User.objects.create_user(email="ama@example.com", phone="+233 24-123-4567", password="pass12345")


@pytest.mark.django_db
def test_resolves_by_primary_key(member):
    result = resolve_user(member.pk, "someone-else@example.com")

    assert isinstance(result, Found)
    assert result.user == member
    assert result.matched_by == "id"


@pytest.mark.django_db
def test_falls_back_to_email_when_id_is_unknown(member):
    result = resolve_user(999999, "AMA@example.com")

    assert isinstance(result, Found)
    assert result.user == member
    assert result.matched_by == "email"


@pytest.mark.django_db
def test_malformed_id_is_treated_as_a_miss(member):
    result = resolve_user("not-a-number", member.email)

    assert isinstance(result, Found)
    assert result.matched_by == "email"


@pytest.mark.django_db
def test_inactive_users_are_not_resolved(member):
    member.is_active = False
    member.save(update_fields=["is_active"])

    result = resolve_user(member.pk, member.email)

    assert isinstance(result, NotFound)
    assert result.user_id == member.pk


@pytest.mark.django_db
def test_not_found_without_id_or_email():
    assert isinstance(resolve_user(None, None), NotFound)


@pytest.mark.django_db
def test_manager_normalizes_phone(member):
    assert member.phone == "+233241234567"
    assert member.role == User.RoleChoices.MEMBER
    assert member.has_usable_password()

"""Tests for Ghanaian mobile number and network rules."""

from __future__ import annotations

import pytest

from apps.finances.mobile_money import is_valid_phone, network_catalogue, normalize_phone, resolve_network


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("0241234567", "233241234567"),
        ("024 123 4567", "233241234567"),
        ("+233-24-123-4567", "233241234567"),
        ("241234567", "233241234567"),
        ("233551234567", "233551234567"),
    ],
)
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


@pytest.mark.parametrize("number", ["233241234567", "233501234567", "233571234567"])
def test_valid_numbers(number):
    assert is_valid_phone(number)


@pytest.mark.parametrize("number", ["233311234567", "23324123456", "234241234567", "abc", ""])
def test_invalid_numbers(number):
    assert not is_valid_phone(normalize_phone(number))


def test_network_aliases_map_to_channel_codes():
    assert resolve_network("MTN").code == "mtn"
    assert resolve_network("telecel").code == "vod"
    assert resolve_network("Vodafone").code == "vod"
    assert resolve_network("AirtelTigo").code == "atl"
    assert resolve_network("mpesa") is None
    assert resolve_network(None) is None


def test_catalogue_lists_every_network():
    codes = {entry["code"] for entry in network_catalogue()}

    assert codes == {"mtn", "vod", "atl"}

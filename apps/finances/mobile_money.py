"""Ghanaian mobile-money networks and phone number rules."""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class Network:
    name: str
    code: str
    display_name: str


NETWORKS: dict[str, Network] = {
    "mtn": Network(name="MTN", code="mtn", display_name="MTN Mobile Money"),
    "vodafone": Network(name="VODAFONE", code="vod", display_name="Telecel Cash"),
    "airteltigo": Network(name="AIRTELTIGO", code="atl", display_name="AT Money"),
}

# Alternative spellings accepted from clients.
NETWORK_ALIASES = {
    "telecel": "vodafone",
    "vod": "vodafone",
    "airtel": "airteltigo",
    "tigo": "airteltigo",
    "atl": "airteltigo",
    "at": "airteltigo",
}

MOBILE_PREFIXES = frozenset({"20", "23", "24", "25", "26", "27", "28", "29", "50", "54", "55", "56", "57", "59"})
COUNTRY_CODE = "233"

_SEPARATORS = re.compile(r"[\s\-+()]")


def resolve_network(value: str | None) -> Network | None:
    if not value:
        return None
    key = value.strip().lower().replace(" ", "").replace("-", "")
    key = NETWORK_ALIASES.get(key, key)
    return NETWORKS.get(key)


def normalize_phone(phone: str | None) -> str:
    """Bring a Ghanaian number to the 233XXXXXXXXX form."""
    digits = _SEPARATORS.sub("", phone or "")
    if digits.startswith("0") and len(digits) == 10:
        return COUNTRY_CODE + digits[1:]
    if len(digits) == 9:
        return COUNTRY_CODE + digits
    return digits


def is_valid_phone(normalized: str) -> bool:
    return (
        normalized.isdigit()
        and len(normalized) == 12
        and normalized.startswith(COUNTRY_CODE)
        and normalized[3:5] in MOBILE_PREFIXES
    )


def network_catalogue() -> list[dict[str, str]]:
    return [
        {"name": network.name, "code": network.code, "display_name": network.display_name}
        for network in NETWORKS.values()
    ]

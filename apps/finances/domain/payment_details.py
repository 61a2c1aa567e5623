"""
Payment Details Value Object

Typed view over the ``payment_details`` JSON column of a ledger
transaction. Updates are applied with ``merge``:

- write-once fields (phone, network, network_code) are seeded when the
  transaction is created and never overwritten afterwards
- every other field is last-writer-wins, but a ``None`` in the incoming
  object never erases a stored value
- keys this class does not know about are carried in ``extra`` and
  written back untouched
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from shared.domain.base import ValueObject

WRITE_ONCE_FIELDS = frozenset({'phone', 'network', 'network_code'})
DECIMAL_FIELDS = frozenset({'charged_amount', 'fees', 'reported_amount'})
DATETIME_FIELDS = frozenset({'completed_at', 'failed_at'})


@dataclass(frozen=True)
class PaymentDetails(ValueObject):
    # Seeded at creation
    phone: Optional[str] = None
    network: Optional[str] = None
    network_code: Optional[str] = None

    # Provider facts
    provider_id: Optional[str] = None
    provider_reference: Optional[str] = None
    charge_status: Optional[str] = None
    gateway_response: Optional[str] = None
    channel: Optional[str] = None
    display_text: Optional[str] = None
    currency: Optional[str] = None
    charged_amount: Optional[Decimal] = None
    fees: Optional[Decimal] = None
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    authorization_code: Optional[str] = None
    last4: Optional[str] = None
    bank: Optional[str] = None
    gateway_error: Optional[str] = None
    reported_amount: Optional[Decimal] = None

    extra: Dict[str, Any] = field(default_factory=dict)

    def merge(self, other: 'PaymentDetails') -> 'PaymentDetails':
        """Return a copy with ``other`` applied on top of ``self``."""
        changes: Dict[str, Any] = {}
        for f in fields(self):
            if f.name == 'extra':
                continue
            incoming = getattr(other, f.name)
            if incoming is None:
                continue
            if f.name in WRITE_ONCE_FIELDS and getattr(self, f.name) is not None:
                continue
            changes[f.name] = incoming

        extra = {**self.extra, **other.extra}
        return replace(self, extra=extra, **changes)

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        for f in fields(self):
            if f.name == 'extra':
                continue
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, Decimal):
                value = str(value)
            elif isinstance(value, datetime):
                value = value.isoformat()
            data[f.name] = value
        return data

    @classmethod
    def from_json(cls, data: Optional[Dict[str, Any]]) -> 'PaymentDetails':
        data = dict(data or {})
        known = {f.name for f in fields(cls)} - {'extra'}
        values: Dict[str, Any] = {}
        for name in known:
            if name not in data:
                continue
            raw = data.pop(name)
            if raw is None:
                continue
            if name in DECIMAL_FIELDS:
                values[name] = _to_decimal(raw)
            elif name in DATETIME_FIELDS:
                values[name] = _to_datetime(raw)
            else:
                values[name] = str(raw)
        return cls(extra=data, **values)


def _to_decimal(value: Any) -> Optional[Decimal]:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _to_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        return None

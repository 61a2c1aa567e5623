"""
Common Value Objects

- Money: a monetary amount in the settlement currency, with conversion
  between major units (cedis) and the gateway's minor units (pesewas)
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from shared.domain.base import ValueObject

MINOR_UNITS_PER_MAJOR = 100
CENT = Decimal('0.01')
SUPPORTED_CURRENCIES = ('GHS',)


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Amounts are held in major units and quantized to two decimal places.
    """
    amount: Decimal
    currency: str = 'GHS'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, 'amount', Decimal(str(self.amount)))
            except InvalidOperation:
                raise ValueError(f"Invalid amount: {self.amount!r}")
        if not self.amount.is_finite():
            raise ValueError(f"Invalid amount: {self.amount!r}")
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")
        object.__setattr__(self, 'amount', self.amount.quantize(CENT, rounding=ROUND_HALF_UP))

    @classmethod
    def from_minor_units(cls, minor: Union[int, str, Decimal, None], currency: str = 'GHS') -> 'Money':
        """Build Money from a gateway amount expressed in pesewas."""
        if minor is None:
            minor = 0
        return cls(Decimal(str(minor)) / MINOR_UNITS_PER_MAJOR, currency)

    @property
    def minor_units(self) -> int:
        """Amount in pesewas, rounded half-up to a whole number."""
        return int((self.amount * MINOR_UNITS_PER_MAJOR).to_integral_value(rounding=ROUND_HALF_UP))

    def __str__(self):
        return f"{self.currency} {self.amount:,.2f}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"

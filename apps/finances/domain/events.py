"""
Ledger Domain Events

Published after the guarded transition of a transaction has committed.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class TransactionCompleted(DomainEvent):
    """
    Event: A pending transaction was settled (PENDING -> COMPLETED)

    Triggers:
    - Payment confirmation notification to the member
    """
    transaction_id: int
    user_id: int
    amount: Decimal
    reference: str


@dataclass(kw_only=True)
class TransactionFailed(DomainEvent):
    """
    Event: A pending transaction was declined (PENDING -> FAILED)

    Triggers:
    - Payment failure notification to the member
    """
    transaction_id: int
    user_id: int
    amount: Decimal
    reference: str
    failure_reason: Optional[str] = None

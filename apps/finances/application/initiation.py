"""
Deposit Initiation

Use case for starting a mobile-money contribution:

1. Validate amount, phone and network (no record on failure)
2. Resolve the owning user (no record on failure)
3. Persist a pending transaction, seeded with the normalized input
4. Charge the gateway with the amount in minor units
5. Apply an immediate terminal answer through the guarded transition
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional
import secrets
import string
import time

import structlog

from shared.domain.value_objects import Money
from apps.finances.application.outcomes import apply_charge_result, declined_result
from apps.finances.conf import PaystackConfig
from apps.finances.domain.payment_details import PaymentDetails
from apps.finances.exceptions import AmountMismatch, GatewayUnavailable, UserResolutionError, ValidationError
from apps.finances.mobile_money import is_valid_phone, normalize_phone, resolve_network
from apps.finances.models import SavingsTransaction
from apps.finances.paystack_service import ChargeRequest, PaystackGateway
from apps.users.services import NotFound, resolve_user

logger = structlog.get_logger(__name__)

REFERENCE_ALPHABET = string.digits + string.ascii_uppercase
REFERENCE_SUFFIX_LENGTH = 6


def generate_reference(prefix: str) -> str:
    """``<PREFIX>_<epoch-millis>_<6 base36 chars>``"""
    suffix = ''.join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_SUFFIX_LENGTH))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


@dataclass
class InitiateDepositCommand:
    """Command to start a mobile-money deposit"""
    amount: Any
    phone: str
    network: str
    user_id: Any = None
    email: Optional[str] = None
    description: str = ''
    extra_metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class InitiationResult:
    reference: str
    status: str
    transaction_id: int
    gateway_status: str
    display_text: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'reference': self.reference,
            'status': self.status,
            'transaction_id': self.transaction_id,
            'gateway_status': self.gateway_status,
            'display_text': self.display_text,
            'message': self.message,
        }


class InitiateDepositHandler:
    """
    Handler for InitiateDeposit command

    The pending row is written before the gateway is called, so a crash
    or timeout after the call still leaves a record that a webhook or
    the stale-pending sweep can settle.
    """

    def __init__(self, gateway: PaystackGateway, config: PaystackConfig):
        self.gateway = gateway
        self.config = config

    def handle(self, command: InitiateDepositCommand) -> InitiationResult:
        """
        Raises:
            ValidationError: bad amount, phone or network
            UserResolutionError: no active user matches the request
            GatewayUnavailable: the gateway could not be reached
        """
        amount = self._validate_amount(command.amount)

        phone = normalize_phone(command.phone)
        if not is_valid_phone(phone):
            raise ValidationError("Invalid Ghanaian mobile number")

        network = resolve_network(command.network)
        if network is None:
            raise ValidationError(f"Unsupported mobile money network: {command.network}")

        lookup = resolve_user(command.user_id, command.email)
        if isinstance(lookup, NotFound):
            raise UserResolutionError("User not found")
        user = lookup.user

        reference = generate_reference(self.config.reference_prefix)
        txn = SavingsTransaction.objects.create(
            user=user,
            amount=amount.amount,
            transaction_type=SavingsTransaction.Type.DEPOSIT,
            status=SavingsTransaction.Status.PENDING,
            payment_method=SavingsTransaction.Method.MOBILE_MONEY,
            reference_id=reference,
            payment_details=PaymentDetails(
                phone=phone,
                network=network.name,
                network_code=network.code,
            ).to_json(),
            description=command.description or f"Mobile money deposit via {network.display_name}",
            metadata={**command.extra_metadata, 'resolved_by': lookup.matched_by},
        )
        logger.info(
            "payment.initiated",
            transaction_id=txn.pk,
            reference=reference,
            user_id=user.pk,
            amount=str(amount.amount),
            network=network.code,
        )

        email = command.email or user.email or f"user_{user.pk}@{self.config.email_domain}"
        request = ChargeRequest(
            amount=amount,
            email=email,
            phone=phone,
            network_code=network.code,
            reference=reference,
            metadata={
                'user_id': user.pk,
                'transaction_id': txn.pk,
                'transaction_type': txn.transaction_type,
            },
        )

        try:
            result = self.gateway.charge(request)
        except GatewayUnavailable as exc:
            self._record_unavailable(txn, exc)
            raise

        if result.is_terminal:
            try:
                apply_charge_result(txn, result, source='initiation')
            except AmountMismatch:
                # Left pending for manual reconciliation.
                pass
        else:
            SavingsTransaction.objects.record_pending_details(
                txn.pk,
                result.to_details(),
                transaction_reference=result.reference,
            )

        txn.refresh_from_db()
        return InitiationResult(
            reference=txn.lookup_reference,
            status=txn.status,
            transaction_id=txn.pk,
            gateway_status=result.raw_status or result.status,
            display_text=result.display_text or result.message,
            message=self._outcome_message(txn),
        )

    @staticmethod
    def _outcome_message(txn: SavingsTransaction) -> str:
        if txn.status == SavingsTransaction.Status.COMPLETED:
            return "Payment completed"
        if txn.status == SavingsTransaction.Status.FAILED:
            return f"Payment initialization failed: {txn.details.failure_reason or 'declined by gateway'}"
        return "Payment pending approval on the customer's phone"

    def _validate_amount(self, raw: Any) -> Money:
        try:
            value = Decimal(str(raw))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError("Amount must be a number")
        if not value.is_finite() or value <= 0:
            raise ValidationError("Amount must be greater than zero")
        try:
            money = Money(value, self.config.currency)
        except ValueError as exc:
            raise ValidationError(str(exc))
        if money.minor_units <= 0:
            raise ValidationError("Amount must be greater than zero")
        return money

    def _record_unavailable(self, txn: SavingsTransaction, exc: GatewayUnavailable) -> None:
        logger.warning(
            "payment.gateway_unavailable",
            transaction_id=txn.pk,
            reference=txn.reference_id,
            definitive=exc.definitive,
            error=exc.message,
        )
        if exc.definitive:
            apply_charge_result(txn, declined_result(txn.reference_id, exc.message), source='initiation')
        else:
            SavingsTransaction.objects.record_pending_details(txn.pk, PaymentDetails(gateway_error=exc.message))

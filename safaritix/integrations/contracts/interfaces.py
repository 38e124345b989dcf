from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from .errors import NotFoundError


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESSFUL = "SUCCESSFUL"
    FAILED = "FAILED"


class FailureReason(str, Enum):
    PAYER_NOT_FOUND = "PAYER_NOT_FOUND"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    PAYER_LIMIT_REACHED = "PAYER_LIMIT_REACHED"
    APPROVAL_REJECTED = "APPROVAL_REJECTED"
    EXPIRED = "EXPIRED"
    INTERNAL_PROCESSING_ERROR = "INTERNAL_PROCESSING_ERROR"


class GatewayMode(str, Enum):
    LIVE = "live"
    SIMULATED = "simulated"


# ---------------------------------------------------------------------------
# Shared data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AccessToken:
    token: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class PaymentRequest:
    amount: Decimal
    currency: str
    payer: str                           # MSISDN, normalized before transmission
    external_id: str                     # caller's business key (e.g. ticket id)
    payer_message: Optional[str] = None
    payee_note: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    reference_id: str
    external_id: str
    amount: Decimal
    currency: str
    payer: str
    status: TransactionStatus
    reason: Optional[str] = None         # only set when FAILED
    financial_transaction_id: Optional[str] = None
    payer_message: Optional[str] = None
    payee_note: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not TransactionStatus.PENDING

    def complete(
        self,
        status: TransactionStatus,
        completed_at: datetime,
        *,
        reason: Optional[str] = None,
        financial_transaction_id: Optional[str] = None,
    ) -> "Transaction":
        """Return a terminal copy of a PENDING transaction."""
        if self.is_terminal:
            raise RuntimeError(f"Transaction {self.reference_id} is already {self.status.value}")
        if status is TransactionStatus.PENDING:
            raise ValueError("complete() needs a terminal status")
        return replace(
            self,
            status=status,
            reason=reason if status is TransactionStatus.FAILED else None,
            financial_transaction_id=financial_transaction_id,
            completed_at=completed_at,
        )


@dataclass(frozen=True)
class AccountHolder:
    payer: str
    is_active: bool
    name: Optional[str] = None


@dataclass(frozen=True)
class AccountBalance:
    available: Decimal
    currency: str


@dataclass(frozen=True)
class PaymentProcessingResult:
    account_holder: AccountHolder
    transaction: Transaction
    message: str = field(default="Payment request sent. Customer needs to approve on their phone.")


# ---------------------------------------------------------------------------
# Abstract gateway interface
# ---------------------------------------------------------------------------

class PaymentGateway(ABC):
    """Every MTN MoMo gateway (live or simulated) must implement this interface."""

    @property
    @abstractmethod
    def mode(self) -> GatewayMode:
        """Return which backend this gateway talks to."""

    @abstractmethod
    async def validate_account_holder(self, payer: str) -> AccountHolder:
        """Check that the payer is a registered, active wallet holder."""

    @abstractmethod
    async def request_to_pay(self, request: PaymentRequest) -> Transaction:
        """Initiate a collection (debit prompt on the payer's phone)."""

    @abstractmethod
    async def check_transaction_status(self, reference_id: str) -> Transaction:
        """Return the current snapshot of a previously initiated payment."""

    @abstractmethod
    async def get_account_balance(self) -> AccountBalance:
        """Return the collection account balance."""

    async def process_payment(self, request: PaymentRequest) -> PaymentProcessingResult:
        """
        Validate the payer, then initiate the payment.

        Returns straight after initiation; polling for the outcome is the
        caller's job.
        """
        holder = await self.validate_account_holder(request.payer)
        if not holder.is_active:
            raise NotFoundError(
                "Phone number is not registered with MTN Mobile Money",
                details={"payer": holder.payer},
            )
        transaction = await self.request_to_pay(request)
        return PaymentProcessingResult(account_holder=holder, transaction=transaction)

    async def aclose(self) -> None:
        """Release network resources. No-op unless overridden."""

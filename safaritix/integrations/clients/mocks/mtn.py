"""
MTN Mobile Money: SIMULATED gateway.

⚠️  This gateway never talks to MTN. It honours the exact PaymentGateway
    contract of the live client (same operations, same error types) so the
    checkout flow and its tests run without credentials or a network.
    Outcomes are deterministic per payer/amount (see outcomes.py) and
    transactions live in an in-memory TransactionStore (reset on restart).
"""

import asyncio
import logging
import random
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, List, Mapping, Optional, Tuple

from safaritix.integrations.clients.mocks.outcomes import (
    DEFAULT_AMOUNT_CEILING,
    MOCK_ACCOUNTS,
    PENDING_SUFFIX,
    MockAccount,
    simulate_outcome,
)
from safaritix.integrations.clients.mocks.transaction_store import TransactionStore
from safaritix.integrations.contracts.errors import NotFoundError
from safaritix.integrations.contracts.interfaces import (
    AccountBalance,
    AccountHolder,
    GatewayMode,
    PaymentGateway,
    PaymentRequest,
    Transaction,
    TransactionStatus,
)
from safaritix.integrations.contracts.payments import (
    ensure_valid_payer,
    ensure_valid_payment_request,
    ensure_valid_reference_id,
    mask_phone_number,
    normalize_phone_number,
    payee_note_for,
    payer_message_for,
)

logger = logging.getLogger(__name__)

DEFAULT_DWELL = timedelta(seconds=5)
DEFAULT_LATENCY = (0.3, 1.0)
MOCK_BALANCE = AccountBalance(available=Decimal("5000000"), currency="EUR")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Simulated gateway
# ---------------------------------------------------------------------------

class MTNMockGateway(PaymentGateway):
    """
    Simulated MTN MoMo gateway.

    Parameters
    ----------
    store : TransactionStore
        Owner of every simulated transaction. A fresh one is created if omitted.
    accounts : Mapping[str, MockAccount]
        Registered test wallets. Defaults to MOCK_ACCOUNTS.
    amount_ceiling : Decimal
        Amounts above this fail with INSUFFICIENT_FUNDS. Default 1,000,000.
    pending_suffix : str
        Payers ending with this stay PENDING until the dwell time passes.
    dwell : timedelta
        Age at which a PENDING transaction is promoted to SUCCESSFUL. Default 5s.
    latency : (float, float)
        Bounds, in seconds, of the artificial delay added to every call.
    clock : callable
        Returns the current aware datetime. Tests pass a fake one.
    """

    def __init__(
        self,
        store: Optional[TransactionStore] = None,
        accounts: Mapping[str, MockAccount] = MOCK_ACCOUNTS,
        amount_ceiling: Decimal = DEFAULT_AMOUNT_CEILING,
        pending_suffix: str = PENDING_SUFFIX,
        dwell: timedelta = DEFAULT_DWELL,
        latency: Tuple[float, float] = DEFAULT_LATENCY,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._store = store if store is not None else TransactionStore()
        self._accounts = dict(accounts)
        self._amount_ceiling = Decimal(amount_ceiling)
        self._pending_suffix = pending_suffix
        self._dwell = dwell
        self._latency = latency
        self._clock = clock

        logger.info(
            "[MTN MOCK] Gateway initialised (accounts=%d, ceiling=%s, dwell=%ss)",
            len(self._accounts), self._amount_ceiling, self._dwell.total_seconds(),
        )

    @property
    def mode(self) -> GatewayMode:
        return GatewayMode.SIMULATED

    @property
    def store(self) -> TransactionStore:
        return self._store

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _simulate_latency(self, operation: str) -> None:
        low, high = self._latency
        delay = random.uniform(low, high) if high > 0 else 0.0
        logger.debug("[MTN MOCK] Simulating %.2fs network latency for %s", delay, operation)
        await asyncio.sleep(delay)

    def _new_financial_id(self) -> str:
        return f"mock_fin_{uuid.uuid4().hex[:12]}"

    def _promote_if_due(self, transaction: Transaction) -> Transaction:
        if transaction.status is not TransactionStatus.PENDING or transaction.created_at is None:
            return transaction
        now = self._clock()
        if now - transaction.created_at < self._dwell:
            return transaction
        return transaction.complete(
            TransactionStatus.SUCCESSFUL,
            now,
            financial_transaction_id=self._new_financial_id(),
        )

    # ------------------------------------------------------------------
    # Gateway contract
    # ------------------------------------------------------------------

    async def validate_account_holder(self, payer: str) -> AccountHolder:
        phone = ensure_valid_payer(payer)
        await self._simulate_latency("validate_account_holder")

        account = self._accounts.get(phone)
        if account is None or not account.active:
            logger.info("[MTN MOCK] Account %s not found or inactive", mask_phone_number(phone))
            raise NotFoundError(
                "Phone number not registered with MTN Mobile Money",
                details={"payer": phone},
            )

        logger.info("[MTN MOCK] Account %s is active", mask_phone_number(phone))
        return AccountHolder(payer=phone, is_active=True, name=account.name)

    async def request_to_pay(self, request: PaymentRequest) -> Transaction:
        ensure_valid_payment_request(request)

        phone = normalize_phone_number(request.payer)
        amount = Decimal(str(request.amount))
        logger.info("[MTN MOCK] Processing request-to-pay amount=%s %s phone=%s",
                    amount, request.currency, mask_phone_number(phone))
        await self._simulate_latency("request_to_pay")

        outcome = simulate_outcome(
            phone,
            amount,
            accounts=self._accounts,
            amount_ceiling=self._amount_ceiling,
            pending_suffix=self._pending_suffix,
        )
        now = self._clock()
        terminal = outcome.status is not TransactionStatus.PENDING

        transaction = Transaction(
            reference_id=str(uuid.uuid4()),
            external_id=request.external_id,
            amount=amount,
            currency=request.currency,
            payer=phone,
            status=outcome.status,
            reason=outcome.reason,
            financial_transaction_id=(
                self._new_financial_id() if outcome.status is TransactionStatus.SUCCESSFUL else None
            ),
            payer_message=payer_message_for(request),
            payee_note=payee_note_for(request),
            created_at=now,
            completed_at=now if terminal else None,
        )
        await self._store.insert(transaction)

        logger.info("[MTN MOCK] Payment %s → %s", transaction.reference_id, transaction.status.value)
        return transaction

    async def check_transaction_status(self, reference_id: str) -> Transaction:
        reference_id = ensure_valid_reference_id(reference_id)
        logger.info("[MTN MOCK] Checking transaction status: %s", reference_id)
        await self._simulate_latency("check_transaction_status")

        transaction = await self._store.apply(reference_id, self._promote_if_due)
        logger.info("[MTN MOCK] Transaction %s status: %s", reference_id, transaction.status.value)
        return transaction

    async def get_account_balance(self) -> AccountBalance:
        await self._simulate_latency("get_account_balance")
        logger.info("[MTN MOCK] Account balance retrieved")
        return MOCK_BALANCE

    # ------------------------------------------------------------------
    # Test harness helpers (not part of the gateway contract)
    # ------------------------------------------------------------------

    async def list_transactions(self) -> List[Transaction]:
        return await self._store.list_transactions()

    async def clear(self) -> None:
        await self._store.clear()
        logger.info("[MTN MOCK] Mock data cleared")

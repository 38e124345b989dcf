"""
Deterministic payment outcomes for the simulated MTN gateway.

The outcome depends only on (payer, amount), so tests can drive every
terminal path and the PENDING -> SUCCESSFUL promotion without a network.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional

from safaritix.integrations.contracts.interfaces import FailureReason, TransactionStatus


@dataclass(frozen=True)
class MockAccount:
    name: str
    active: bool = True


@dataclass(frozen=True)
class SimulatedOutcome:
    status: TransactionStatus
    reason: Optional[str] = None


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------

MOCK_ACCOUNTS: Mapping[str, MockAccount] = {
    "250788123456": MockAccount(name="John Doe"),
    "250788123457": MockAccount(name="Jane Smith"),
    "250788123458": MockAccount(name="Bob Johnson"),
    "250700000000": MockAccount(name="Invalid User", active=False),
}

DEFAULT_AMOUNT_CEILING = Decimal("1000000")
PENDING_SUFFIX = "999"

# Unlisted payers behave like ordinary active wallets.
_UNLISTED = MockAccount(name="Mock User")


def simulate_outcome(
    payer: str,
    amount: Decimal,
    *,
    accounts: Mapping[str, MockAccount] = MOCK_ACCOUNTS,
    amount_ceiling: Decimal = DEFAULT_AMOUNT_CEILING,
    pending_suffix: str = PENDING_SUFFIX,
) -> SimulatedOutcome:
    """
    Map a payer and amount to the outcome the simulated provider reports.

    Rules, first match wins:
    1. payer listed as inactive -> FAILED / PAYER_NOT_FOUND
    2. amount above the ceiling -> FAILED / INSUFFICIENT_FUNDS
    3. payer ends with the pending suffix -> PENDING (promoted after the dwell)
    4. anything else -> SUCCESSFUL
    """
    account = accounts.get(payer, _UNLISTED)

    if not account.active:
        return SimulatedOutcome(TransactionStatus.FAILED, FailureReason.PAYER_NOT_FOUND.value)
    if Decimal(amount) > amount_ceiling:
        return SimulatedOutcome(TransactionStatus.FAILED, FailureReason.INSUFFICIENT_FUNDS.value)
    if pending_suffix and payer.endswith(pending_suffix):
        return SimulatedOutcome(TransactionStatus.PENDING)
    return SimulatedOutcome(TransactionStatus.SUCCESSFUL)

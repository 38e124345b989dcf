from decimal import Decimal

import pytest

from safaritix.integrations.clients.mocks.outcomes import MockAccount, simulate_outcome
from safaritix.integrations.contracts.interfaces import TransactionStatus


@pytest.mark.parametrize(
    "payer, amount, status, reason",
    [
        ("250788123456", Decimal("50000"), TransactionStatus.SUCCESSFUL, None),
        ("250788123457", Decimal("1000000"), TransactionStatus.SUCCESSFUL, None),  # ceiling is inclusive
        ("250700000000", Decimal("100"), TransactionStatus.FAILED, "PAYER_NOT_FOUND"),
        ("250788123456", Decimal("1000000.01"), TransactionStatus.FAILED, "INSUFFICIENT_FUNDS"),
        ("250781111111", Decimal("2000000"), TransactionStatus.FAILED, "INSUFFICIENT_FUNDS"),
        ("250788000999", Decimal("500"), TransactionStatus.PENDING, None),
        ("250781111111", Decimal("500"), TransactionStatus.SUCCESSFUL, None),
    ],
)
def test_default_outcomes(payer, amount, status, reason):
    outcome = simulate_outcome(payer, amount)
    assert outcome.status is status
    assert outcome.reason == reason


def test_inactive_payer_wins_over_amount_and_suffix():
    accounts = {"250700000999": MockAccount(name="Closed", active=False)}
    outcome = simulate_outcome("250700000999", Decimal("5000000"), accounts=accounts)
    assert outcome.status is TransactionStatus.FAILED
    assert outcome.reason == "PAYER_NOT_FOUND"


def test_ceiling_is_checked_before_pending_suffix():
    outcome = simulate_outcome("250788000999", Decimal("1000001"))
    assert outcome.reason == "INSUFFICIENT_FUNDS"


def test_custom_ceiling_and_suffix():
    outcome = simulate_outcome("250788123456", Decimal("150"), amount_ceiling=Decimal("100"))
    assert outcome.reason == "INSUFFICIENT_FUNDS"

    pending = simulate_outcome("250788123000", Decimal("10"), pending_suffix="000")
    assert pending.status is TransactionStatus.PENDING


def test_outcome_is_deterministic():
    first = simulate_outcome("250788123458", Decimal("42"))
    assert all(simulate_outcome("250788123458", Decimal("42")) == first for _ in range(20))

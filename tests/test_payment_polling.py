from decimal import Decimal

import pytest

from safaritix.integrations.contracts.errors import NotFoundError
from safaritix.integrations.contracts.interfaces import PaymentRequest, TransactionStatus
from safaritix.integrations.policy.payment_polling import wait_for_terminal_status


class ManualTime:
    """Monotonic clock + sleep pair that only moves when slept on."""

    def __init__(self, on_sleep=None):
        self.now = 0.0
        self.sleeps = []
        self.on_sleep = on_sleep

    def monotonic(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds
        if self.on_sleep:
            self.on_sleep(seconds)


async def _pending_payment(gateway):
    return await gateway.request_to_pay(
        PaymentRequest(amount=Decimal("100"), currency="RWF", payer="250788000999", external_id="T-1")
    )


@pytest.mark.asyncio
async def test_returns_immediately_when_terminal(mock_gateway):
    txn = await mock_gateway.request_to_pay(
        PaymentRequest(amount=Decimal("100"), currency="RWF", payer="250788123456", external_id="T-1")
    )
    timer = ManualTime()

    result = await wait_for_terminal_status(mock_gateway, txn.reference_id, sleep=timer.sleep, monotonic=timer.monotonic)

    assert result.status is TransactionStatus.SUCCESSFUL
    assert timer.sleeps == []


@pytest.mark.asyncio
async def test_polls_with_backoff_until_promoted(mock_gateway, clock):
    txn = await _pending_payment(mock_gateway)
    timer = ManualTime(on_sleep=clock.advance)

    result = await wait_for_terminal_status(mock_gateway, txn.reference_id, sleep=timer.sleep, monotonic=timer.monotonic)

    assert result.status is TransactionStatus.SUCCESSFUL
    # 1 + 2 = 3s (still pending), + 4 = 7s >= 5s dwell
    assert timer.sleeps == [1.0, 2.0, 4.0]


@pytest.mark.asyncio
async def test_deadline_returns_last_pending_snapshot(mock_gateway):
    txn = await _pending_payment(mock_gateway)
    timer = ManualTime()  # gateway clock never moves, so it stays PENDING

    result = await wait_for_terminal_status(
        mock_gateway,
        txn.reference_id,
        deadline=10.0,
        max_interval=4.0,
        sleep=timer.sleep,
        monotonic=timer.monotonic,
    )

    assert result.status is TransactionStatus.PENDING
    assert timer.sleeps == [1.0, 2.0, 4.0, 3.0]
    assert sum(timer.sleeps) == 10.0


@pytest.mark.asyncio
async def test_gateway_errors_propagate(mock_gateway):
    timer = ManualTime()
    with pytest.raises(NotFoundError):
        await wait_for_terminal_status(mock_gateway, "missing", sleep=timer.sleep, monotonic=timer.monotonic)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs",
    [{"initial_interval": 0}, {"backoff": 0.5}, {"deadline": -1}],
)
async def test_bad_parameters(mock_gateway, kwargs):
    with pytest.raises(ValueError):
        await wait_for_terminal_status(mock_gateway, "ref", **kwargs)

"""
Caller-side polling for payment outcomes.

Gateways never wait for a terminal state themselves. The checkout flow uses
this helper to poll with exponential backoff under an overall deadline.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable

from safaritix.integrations.contracts.interfaces import PaymentGateway, Transaction

logger = logging.getLogger(__name__)


async def wait_for_terminal_status(
    gateway: PaymentGateway,
    reference_id: str,
    *,
    initial_interval: float = 1.0,
    max_interval: float = 8.0,
    backoff: float = 2.0,
    deadline: float = 60.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    monotonic: Callable[[], float] = time.monotonic,
) -> Transaction:
    """
    Poll ``check_transaction_status`` until the payment is SUCCESSFUL or
    FAILED, or until ``deadline`` seconds have passed.

    Returns the last snapshot, which is still PENDING if the deadline won.
    Gateway errors (NotFoundError, UpstreamError, ...) propagate unchanged.
    """
    if initial_interval <= 0 or backoff < 1 or deadline < 0:
        raise ValueError("initial_interval must be > 0, backoff >= 1 and deadline >= 0")

    started = monotonic()
    interval = initial_interval
    polls = 0

    while True:
        transaction = await gateway.check_transaction_status(reference_id)
        polls += 1
        if transaction.is_terminal:
            logger.info("Payment %s reached %s after %d poll(s)", reference_id, transaction.status.value, polls)
            return transaction

        remaining = deadline - (monotonic() - started)
        if remaining <= 0:
            logger.warning("Payment %s still PENDING after %.1fs (%d polls)", reference_id, deadline, polls)
            return transaction

        await sleep(min(interval, remaining))
        interval = min(interval * backoff, max_interval)

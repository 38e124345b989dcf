"""
In-memory transaction store for the simulated MTN gateway.

Non-durable: everything is lost on restart. One asyncio.Lock guards the
whole store, so every read-modify-write on a reference is linearizable.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Optional

from safaritix.integrations.contracts.errors import NotFoundError
from safaritix.integrations.contracts.interfaces import Transaction

logger = logging.getLogger(__name__)

TransactionStep = Callable[[Transaction], Transaction]


class TransactionStore:
    def __init__(self) -> None:
        # reference_id -> latest snapshot
        self._transactions: Dict[str, Transaction] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._transactions)

    async def insert(self, transaction: Transaction) -> Transaction:
        async with self._lock:
            if transaction.reference_id in self._transactions:
                # reference ids are uuid4; a clash means a caller reused one
                raise RuntimeError(f"Duplicate reference id {transaction.reference_id}")
            self._transactions[transaction.reference_id] = transaction
        return transaction

    async def get(self, reference_id: str) -> Optional[Transaction]:
        async with self._lock:
            return self._transactions.get(reference_id)

    async def apply(self, reference_id: str, step: TransactionStep) -> Transaction:
        """
        Run ``step`` on the stored snapshot and persist its result atomically.

        ``step`` must be synchronous; it runs while the lock is held. A step
        may leave the snapshot unchanged, but it may never move a terminal
        transaction anywhere else.
        """
        async with self._lock:
            current = self._transactions.get(reference_id)
            if current is None:
                raise NotFoundError(
                    "Transaction not found. Invalid reference ID.",
                    details={"reference_id": reference_id},
                )

            updated = step(current)
            if current.is_terminal and updated != current:
                raise RuntimeError(
                    f"Transaction {reference_id} is {current.status.value}; terminal state cannot change"
                )
            if updated is not current:
                self._transactions[reference_id] = updated
                logger.debug("Transaction %s: %s -> %s", reference_id, current.status.value, updated.status.value)
            return updated

    # --- Test harness helpers ---------------------------------------------

    async def list_transactions(self) -> List[Transaction]:
        async with self._lock:
            return list(self._transactions.values())

    async def clear(self) -> None:
        async with self._lock:
            self._transactions.clear()

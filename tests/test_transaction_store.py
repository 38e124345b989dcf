import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from safaritix.integrations.contracts.errors import NotFoundError
from safaritix.integrations.contracts.interfaces import Transaction, TransactionStatus

CREATED = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def _pending(reference_id: str = "ref-1") -> Transaction:
    return Transaction(
        reference_id=reference_id,
        external_id="TICKET-1",
        amount=Decimal("1500"),
        currency="RWF",
        payer="250788123456",
        status=TransactionStatus.PENDING,
        created_at=CREATED,
    )


@pytest.mark.asyncio
async def test_insert_and_get(store):
    txn = _pending()
    await store.insert(txn)

    assert await store.get("ref-1") == txn
    assert await store.get("missing") is None
    assert len(store) == 1


@pytest.mark.asyncio
async def test_duplicate_reference_is_a_programming_error(store):
    await store.insert(_pending())
    with pytest.raises(RuntimeError):
        await store.insert(_pending())


@pytest.mark.asyncio
async def test_apply_persists_step_result(store):
    await store.insert(_pending())

    done = await store.apply("ref-1", lambda t: t.complete(TransactionStatus.SUCCESSFUL, CREATED, financial_transaction_id="fin-1"))

    assert done.status is TransactionStatus.SUCCESSFUL
    assert (await store.get("ref-1")).financial_transaction_id == "fin-1"


@pytest.mark.asyncio
async def test_apply_unknown_reference_raises_not_found(store):
    with pytest.raises(NotFoundError):
        await store.apply("nope", lambda t: t)


@pytest.mark.asyncio
async def test_terminal_transaction_cannot_change(store):
    await store.insert(_pending())
    await store.apply("ref-1", lambda t: t.complete(TransactionStatus.FAILED, CREATED, reason="EXPIRED"))

    with pytest.raises(RuntimeError):
        await store.apply("ref-1", lambda t: replace(t, status=TransactionStatus.PENDING))

    # A no-op step on a terminal transaction is fine.
    same = await store.apply("ref-1", lambda t: t)
    assert same.status is TransactionStatus.FAILED
    assert same.reason == "EXPIRED"


def test_complete_refuses_terminal_or_pending_targets():
    txn = _pending()
    with pytest.raises(ValueError):
        txn.complete(TransactionStatus.PENDING, CREATED)

    done = txn.complete(TransactionStatus.SUCCESSFUL, CREATED, reason="ignored")
    assert done.reason is None  # reason only applies to FAILED
    with pytest.raises(RuntimeError):
        done.complete(TransactionStatus.FAILED, CREATED)


@pytest.mark.asyncio
async def test_concurrent_inserts_are_not_lost(store):
    await asyncio.gather(*(store.insert(_pending(f"ref-{i}")) for i in range(50)))
    assert len(await store.list_transactions()) == 50


@pytest.mark.asyncio
async def test_clear_empties_store(store):
    await store.insert(_pending())
    await store.clear()
    assert await store.list_transactions() == []

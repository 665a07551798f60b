import asyncio
import time

import pytest

from tokenforge.common.enums import BatchStatus, TokenType
from tokenforge.common.exceptions import (
    DuplicateAddressError,
    InsufficientFundsError,
    NetworkMismatchError,
    PreconditionError,
    RecordNotFoundError,
    UserRejectedError,
)
from tokenforge.modules.multisend.dtos.multisend import BatchSpec, Recipient
from tokenforge.modules.multisend.services.batch_orchestrator import (
    BatchOrchestrator,
    classify_batch_status,
)
from tokenforge.modules.multisend.services.record_store import InMemoryRecordStore
from tokenforge.modules.wallet.transaction_submitter import TransactionSubmitter

from .conftest import ALICE, BOB, CAROL, CHAIN_ID, SENDER, TOKEN, FakeWalletProvider


def make_spec(*addresses, **kwargs):
    recipients = [Recipient(address=a, amount=str(i + 1)) for i, a in enumerate(addresses)]
    return BatchSpec(recipients=recipients, **kwargs)


def make_orchestrator(wallet, store, sleep, **kwargs):
    submitter = TransactionSubmitter(wallet, expected_chain_id=CHAIN_ID)
    return BatchOrchestrator(submitter, store, inter_transaction_delay=2.0, sleep=sleep, **kwargs)


@pytest.mark.parametrize(
    ("total", "failed", "expected"),
    [
        (3, 0, BatchStatus.CONFIRMED),
        (3, 3, BatchStatus.FAILED),
        (3, 1, BatchStatus.PARTIALLY_FAILED),
        (1, 1, BatchStatus.FAILED),
    ],
)
def test_classify_batch_status(total, failed, expected):
    assert classify_batch_status(total, failed) is expected


def test_all_recipients_succeed(wallet, memory_store, no_sleep):
    orchestrator = make_orchestrator(wallet, memory_store, no_sleep)

    outcome = asyncio.run(orchestrator.run_batch(make_spec(ALICE, BOB, CAROL)))

    assert outcome.status == BatchStatus.CONFIRMED
    assert len(outcome.transaction_hashes) == 3
    assert outcome.failed_addresses == []

    record = memory_store.get(outcome.record_id)
    assert record.status == BatchStatus.CONFIRMED
    assert record.transaction_hashes == outcome.transaction_hashes
    assert record.total_amount == "6"
    assert record.sender_address == SENDER
    assert record.gas_used == "0"


def test_all_recipients_fail(memory_store, no_sleep):
    wallet = FakeWalletProvider(
        failures={a: InsufficientFundsError("insufficient funds") for a in (ALICE, BOB)}
    )
    orchestrator = make_orchestrator(wallet, memory_store, no_sleep)

    outcome = asyncio.run(orchestrator.run_batch(make_spec(ALICE, BOB)))

    assert outcome.status == BatchStatus.FAILED
    assert outcome.transaction_hashes == []
    assert outcome.failed_addresses == [ALICE, BOB]


def test_second_of_three_fails(memory_store, no_sleep):
    wallet = FakeWalletProvider(failures={BOB: UserRejectedError("Transaction was rejected by user")})
    orchestrator = make_orchestrator(wallet, memory_store, no_sleep)

    outcome = asyncio.run(orchestrator.run_batch(make_spec(ALICE, BOB, CAROL)))

    assert outcome.status == BatchStatus.PARTIALLY_FAILED
    assert len(outcome.transaction_hashes) == 2
    assert outcome.failed_addresses == [BOB]

    record = memory_store.get(outcome.record_id)
    assert record.status == BatchStatus.PARTIALLY_FAILED
    assert len(record.transaction_hashes) + len(record.failed_addresses) == len(record.recipients)


def test_unexpected_submitter_exception_counts_as_failure(memory_store, no_sleep):
    wallet = FakeWalletProvider(failures={ALICE: RuntimeError("boom")})
    orchestrator = make_orchestrator(wallet, memory_store, no_sleep)

    outcome = asyncio.run(orchestrator.run_batch(make_spec(ALICE, BOB)))

    assert outcome.status == BatchStatus.PARTIALLY_FAILED
    assert outcome.failed_addresses == [ALICE]


def test_recipients_are_sent_one_at_a_time_with_delay_between(wallet, memory_store):
    async def sleep(seconds):
        wallet.events.append(("sleep", seconds))

    orchestrator = make_orchestrator(wallet, memory_store, sleep)

    asyncio.run(orchestrator.run_batch(make_spec(ALICE, BOB, CAROL)))

    assert wallet.events == [
        ("send", ALICE.lower()),
        ("sleep", 2.0),
        ("send", BOB.lower()),
        ("sleep", 2.0),
        ("send", CAROL.lower()),
    ]


def test_single_recipient_does_not_sleep(wallet, memory_store, no_sleep):
    orchestrator = make_orchestrator(wallet, memory_store, no_sleep)

    asyncio.run(orchestrator.run_batch(make_spec(ALICE)))

    assert no_sleep.delays == []


def test_record_is_pending_while_the_batch_runs(wallet, memory_store):
    seen = []

    async def sleep(seconds):
        record = memory_store.list_all()[0]
        seen.append((record.status, len(record.transaction_hashes)))

    orchestrator = make_orchestrator(wallet, memory_store, sleep)

    asyncio.run(orchestrator.run_batch(make_spec(ALICE, BOB, CAROL)))

    # El progreso se guarda después de cada destinatario
    assert seen == [(BatchStatus.PENDING, 1), (BatchStatus.PENDING, 2)]


def test_progress_persistence_can_be_disabled(wallet, memory_store):
    seen = []

    async def sleep(seconds):
        seen.append(len(memory_store.list_all()[0].transaction_hashes))

    orchestrator = make_orchestrator(wallet, memory_store, sleep, persist_progress=False)

    asyncio.run(orchestrator.run_batch(make_spec(ALICE, BOB)))

    assert seen == [0]


def test_erc20_batch_uses_token_transfers(memory_store, no_sleep):
    wallet = FakeWalletProvider()
    orchestrator = make_orchestrator(wallet, memory_store, no_sleep)
    spec = make_spec(ALICE, BOB, token_type=TokenType.ERC20, token_address=TOKEN, token_symbol="FRG")

    outcome = asyncio.run(orchestrator.run_batch(spec))

    assert outcome.status == BatchStatus.CONFIRMED
    assert all(tx["data"].startswith("0xa9059cbb") for tx in wallet.sent)
    record = memory_store.get(outcome.record_id)
    assert record.token_type == TokenType.ERC20
    assert record.token_symbol == "FRG"


def test_cancelled_run_leaves_record_pending(memory_store, no_sleep):
    wallet = FakeWalletProvider(failures={BOB: asyncio.CancelledError()})
    orchestrator = make_orchestrator(wallet, memory_store, no_sleep)

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(orchestrator.run_batch(make_spec(ALICE, BOB, CAROL)))

    record = memory_store.list_all()[0]
    assert record.status == BatchStatus.PENDING
    assert len(record.transaction_hashes) == 1


class FlakyStore(InMemoryRecordStore):
    """Falla en la actualización número ``fail_on``; la marca de fallo final sí se guarda."""

    def __init__(self, fail_on):
        super().__init__()
        self.fail_on = fail_on
        self.updates = 0

    def update(self, record_id, fields):
        self.updates += 1
        if self.updates == self.fail_on:
            raise RuntimeError("disk full")
        return super().update(record_id, fields)


def test_storage_failure_marks_record_failed_and_reraises(wallet, no_sleep):
    store = FlakyStore(fail_on=2)
    orchestrator = make_orchestrator(wallet, store, no_sleep)

    with pytest.raises(RuntimeError, match="disk full"):
        asyncio.run(orchestrator.run_batch(make_spec(ALICE, BOB, CAROL)))

    record = store.list_all()[0]
    assert record.status == BatchStatus.FAILED
    assert len(record.transaction_hashes) == 2
    assert record.failed_addresses == [CAROL]
    # Solo se enviaron los dos primeros
    assert len(wallet.sent) == 2


def test_best_effort_write_failure_keeps_original_error(wallet, no_sleep):
    class BrokenStore(InMemoryRecordStore):
        def update(self, record_id, fields):
            raise RuntimeError("database gone")

    store = BrokenStore()
    orchestrator = make_orchestrator(wallet, store, no_sleep)

    with pytest.raises(RuntimeError, match="database gone"):
        asyncio.run(orchestrator.run_batch(make_spec(ALICE, BOB)))

    assert store.list_all()[0].status == BatchStatus.PENDING


@pytest.mark.parametrize(
    ("provider", "spec"),
    [
        (FakeWalletProvider(), BatchSpec(recipients=[])),
        (FakeWalletProvider(), make_spec(ALICE, token_type=TokenType.ERC20)),
        (FakeWalletProvider(accounts=[]), make_spec(ALICE)),
        (FakeWalletProvider(chain_id=1), make_spec(ALICE)),
        (FakeWalletProvider(), make_spec(ALICE, sender_address=BOB)),
        (None, make_spec(ALICE)),
    ],
)
def test_preconditions_create_no_record(provider, spec, memory_store, no_sleep):
    orchestrator = make_orchestrator(provider, memory_store, no_sleep)

    with pytest.raises(PreconditionError):
        asyncio.run(orchestrator.run_batch(spec))

    assert memory_store.list_all() == []


def test_duplicate_recipients_are_rejected_before_start(wallet, memory_store, no_sleep):
    spec = BatchSpec(
        recipients=[
            Recipient(address="0xabcdefabcdefabcdefabcdefabcdefabcdefabcd", amount="1"),
            Recipient(address="0xABCDEFABCDEFABCDEFABCDEFABCDEFABCDEFABCD", amount="2"),
        ]
    )
    orchestrator = make_orchestrator(wallet, memory_store, no_sleep)

    with pytest.raises(PreconditionError) as exc_info:
        asyncio.run(orchestrator.run_batch(spec))

    assert isinstance(exc_info.value.__cause__, DuplicateAddressError)
    assert memory_store.list_all() == []
    assert wallet.events == []


def test_network_mismatch_is_chained(memory_store, no_sleep):
    orchestrator = make_orchestrator(FakeWalletProvider(chain_id=1), memory_store, no_sleep)

    with pytest.raises(PreconditionError) as exc_info:
        asyncio.run(orchestrator.run_batch(make_spec(ALICE)))

    assert isinstance(exc_info.value.__cause__, NetworkMismatchError)


def test_batch_against_database_store(wallet, repository_store, no_sleep):
    wallet.failures[CAROL.lower()] = InsufficientFundsError("insufficient funds")
    orchestrator = make_orchestrator(wallet, repository_store, no_sleep)

    outcome = asyncio.run(orchestrator.run_batch(make_spec(ALICE, BOB, CAROL)))

    record = repository_store.get(outcome.record_id)
    assert record.status == BatchStatus.PARTIALLY_FAILED
    assert record.transaction_hashes == outcome.transaction_hashes
    assert record.failed_addresses == [CAROL]
    assert [r.address for r in record.recipients] == [ALICE, BOB, CAROL]


def test_wallet_is_checked_once_per_batch(wallet, memory_store, no_sleep):
    orchestrator = make_orchestrator(wallet, memory_store, no_sleep)

    asyncio.run(orchestrator.run_batch(make_spec(ALICE, BOB, CAROL)))

    assert len(wallet.sent) == 3
    assert wallet.lookups == {"accounts": 1, "chain_id": 1}


def test_slow_store_does_not_block_the_event_loop(wallet, no_sleep):
    class SlowStore(InMemoryRecordStore):
        def update(self, record_id, fields):
            time.sleep(0.05)
            return super().update(record_id, fields)

    orchestrator = make_orchestrator(wallet, SlowStore(), no_sleep)
    ticks = []

    async def ticker(done):
        while not done.is_set():
            ticks.append(1)
            await asyncio.sleep(0.005)

    async def main():
        done = asyncio.Event()
        task = asyncio.create_task(ticker(done))
        try:
            return await orchestrator.run_batch(make_spec(ALICE, BOB, CAROL))
        finally:
            done.set()
            await task

    outcome = asyncio.run(main())

    assert outcome.status == BatchStatus.CONFIRMED
    # Cuatro escrituras de 50 ms; el ticker sigue corriendo mientras tanto
    assert len(ticks) >= 10


def test_record_missing_at_final_update_raises(wallet, no_sleep):
    class VanishingStore(InMemoryRecordStore):
        def update(self, record_id, fields):
            if fields.status is not None:
                return None
            return super().update(record_id, fields)

    store = VanishingStore()
    orchestrator = make_orchestrator(wallet, store, no_sleep)

    with pytest.raises(RecordNotFoundError):
        asyncio.run(orchestrator.run_batch(make_spec(ALICE, BOB)))

    record = store.list_all()[0]
    assert record.status == BatchStatus.PENDING
    assert len(record.transaction_hashes) == 2

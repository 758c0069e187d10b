"""Unit tests for BalanceLedger and balance-changed notifications."""
import asyncio
from unittest.mock import MagicMock

import pytest

from src.tr_account.domain.events import BalanceEvents
from src.tr_account.domain.ledger import BalanceLedger
from src.tr_common.errors import BetValidationError, InsufficientBalanceError
from src.tr_persistence.domain import keys
from src.tr_persistence.infrastructure.memory_backend import InMemoryBackend
from src.tr_persistence.layer import PersistenceLayer

ADDR = "ALICE"


@pytest.fixture
def store() -> PersistenceLayer:
    return PersistenceLayer(InMemoryBackend())


@pytest.fixture
def ledger(store: PersistenceLayer) -> BalanceLedger:
    return BalanceLedger(store, initial_balance=1_000)


class TestAccounts:
    async def test_open_account_seeds_initial_balance(self, ledger: BalanceLedger) -> None:
        assert ledger.balance_of(ADDR) == 0.0
        assert await ledger.open_account(ADDR) == 1_000
        assert ledger.has_account(ADDR)

    async def test_open_account_is_idempotent(self, ledger: BalanceLedger) -> None:
        await ledger.open_account(ADDR)
        await ledger.debit(ADDR, 100)
        assert await ledger.open_account(ADDR) == 900


class TestDebitCredit:
    async def test_debit_and_credit(self, ledger: BalanceLedger) -> None:
        await ledger.open_account(ADDR)
        assert await ledger.debit(ADDR, 250) == 750
        assert await ledger.credit(ADDR, 100.5) == 850.5

    async def test_overdraft_rejected_and_unchanged(self, store: PersistenceLayer) -> None:
        ledger = BalanceLedger(store, initial_balance=30)
        await ledger.open_account(ADDR)
        with pytest.raises(InsufficientBalanceError) as exc_info:
            await ledger.debit(ADDR, 50)
        assert exc_info.value.code == 2001
        assert ledger.balance_of(ADDR) == 30

    async def test_debit_entire_balance(self, ledger: BalanceLedger) -> None:
        await ledger.open_account(ADDR)
        assert await ledger.debit(ADDR, 1_000) == 0.0

    @pytest.mark.parametrize("amount", [0, -1, float("nan"), float("inf")])
    async def test_debit_rejects_bad_amounts(self, ledger: BalanceLedger, amount: float) -> None:
        await ledger.open_account(ADDR)
        with pytest.raises(BetValidationError):
            await ledger.debit(ADDR, amount)
        assert ledger.balance_of(ADDR) == 1_000

    async def test_credit_rejects_negative(self, ledger: BalanceLedger) -> None:
        with pytest.raises(BetValidationError):
            await ledger.credit(ADDR, -5)

    async def test_persisted_after_mutation(
        self, ledger: BalanceLedger, store: PersistenceLayer
    ) -> None:
        await ledger.open_account(ADDR)
        await ledger.debit(ADDR, 10)
        assert await store.load(keys.BALANCES) == {ADDR: 990}


class TestLoad:
    async def test_reload(self, ledger: BalanceLedger, store: PersistenceLayer) -> None:
        await ledger.open_account(ADDR)
        await ledger.debit(ADDR, 123)
        reloaded = BalanceLedger(store, initial_balance=1_000)
        await reloaded.load()
        assert reloaded.balance_of(ADDR) == 877

    async def test_corrupted_values_heal_to_initial(self) -> None:
        backend = InMemoryBackend({"tr:balances": '{"ALICE": "abc", "BOB": -5, "CAROL": 42}'})
        store = PersistenceLayer(backend)
        ledger = BalanceLedger(store, initial_balance=1_000)
        await ledger.load()
        assert ledger.balance_of("ALICE") == 1_000
        assert ledger.balance_of("BOB") == 1_000
        assert ledger.balance_of("CAROL") == 42
        assert await store.load(keys.BALANCES) == {"ALICE": 1_000, "BOB": 1_000, "CAROL": 42}

    async def test_non_mapping_replaced(self) -> None:
        store = PersistenceLayer(InMemoryBackend({"tr:balances": "[1, 2]"}))
        ledger = BalanceLedger(store, initial_balance=1_000)
        await ledger.load()
        assert await store.load(keys.BALANCES) == {}

    async def test_reset_clears(self, ledger: BalanceLedger, store: PersistenceLayer) -> None:
        await ledger.open_account(ADDR)
        await ledger.reset()
        assert not ledger.has_account(ADDR)
        assert await store.load(keys.BALANCES) is None


class TestBalanceEvents:
    async def test_every_mutation_publishes(self, ledger: BalanceLedger) -> None:
        listener = MagicMock()
        ledger.subscribe(listener)
        await ledger.open_account(ADDR)
        await ledger.debit(ADDR, 10)
        await ledger.credit(ADDR, 5)
        assert listener.call_count == 3

    async def test_rejected_debit_does_not_publish(self, ledger: BalanceLedger) -> None:
        await ledger.open_account(ADDR)
        listener = MagicMock()
        ledger.subscribe(listener)
        with pytest.raises(InsufficientBalanceError):
            await ledger.debit(ADDR, 5_000)
        listener.assert_not_called()

    async def test_unsubscribe(self, ledger: BalanceLedger) -> None:
        listener = MagicMock()
        unsubscribe = ledger.subscribe(listener)
        unsubscribe()
        unsubscribe()
        await ledger.open_account(ADDR)
        listener.assert_not_called()
        assert ledger.events.listener_count == 0

    def test_failing_listener_does_not_stop_others(self) -> None:
        events = BalanceEvents()
        failing = MagicMock(side_effect=RuntimeError("boom"))
        healthy = MagicMock()
        events.subscribe(failing)
        events.subscribe(healthy)
        events.publish()
        healthy.assert_called_once()

    async def test_async_listener_runs(self) -> None:
        events = BalanceEvents()
        seen: list[str] = []

        async def listener() -> None:
            seen.append("changed")

        events.subscribe(listener)
        events.publish()
        await asyncio.sleep(0)
        assert seen == ["changed"]

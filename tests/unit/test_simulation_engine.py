"""Unit tests for SimulationEngine: the full local wager lifecycle."""

import pytest

from src.tr_common.enums import Direction, RoundStatus
from src.tr_common.errors import NoClaimableWinningsError, WalletNotConnectedError
from src.tr_engine.core import EngineCore
from src.tr_engine.simulation import SimulationEngine
from src.tr_persistence.layer import PersistenceLayer
from src.tr_round.domain.clock import ManualTickSource
from tests.helpers import FROZEN_MS, make_engine


class TestObservation:
    def test_factory_builds_simulation(self, engine: EngineCore) -> None:
        assert isinstance(engine, SimulationEngine)
        assert engine.simulation is True

    async def test_observe_records_start_price(self, engine: EngineCore) -> None:
        round_ = await engine.observe()
        assert round_.id == 0
        assert round_.status is RoundStatus.ACTIVE
        assert round_.start_price == engine.price_process.current_price

    async def test_completed_round_gets_end_price(
        self, engine: EngineCore, ticks: ManualTickSource
    ) -> None:
        await engine.observe()
        ticks.tick = 25
        current = await engine.observe()
        assert current.id == 1
        done = await engine.get_round(0)
        assert done.status is RoundStatus.COMPLETED
        assert done.end_price == engine.price_process.current_price
        assert done.result is Direction.DOWN  # unchanged price settles DOWN

    async def test_history(self, engine: EngineCore, ticks: ManualTickSource) -> None:
        ticks.tick = 65
        assert [r.id for r in await engine.rounds_history(2)] == [2, 1]

    async def test_refresh_price_moves_history(self, engine: EngineCore) -> None:
        snapshot = await engine.refresh_price()
        assert len(snapshot.history) == 1
        assert snapshot.price == engine.price_process.current_price


class TestSession:
    async def test_actions_need_a_session(self, engine: EngineCore) -> None:
        with pytest.raises(WalletNotConnectedError):
            await engine.place_bet(Direction.UP, 10)
        with pytest.raises(WalletNotConnectedError):
            await engine.balance()

    async def test_connect_demo(self, engine: EngineCore) -> None:
        session = await engine.connect_demo()
        assert session.demo_mode is True
        assert await engine.balance() == 10_000

    async def test_connect_own_address(self, engine: EngineCore) -> None:
        session = await engine.connect("WALLETONE")
        assert session.address == "WALLETONE"
        assert session.demo_mode is False
        assert await engine.balance() == 10_000

    async def test_disconnect(self, engine: EngineCore) -> None:
        await engine.connect_demo()
        await engine.disconnect()
        assert engine.session.connected is False


class TestWagerLifecycle:
    async def test_place_settle_claim(self, engine: EngineCore, ticks: ManualTickSource) -> None:
        await engine.connect_demo()
        bet = await engine.place_bet(Direction.UP, 100)
        assert bet.round_id == 0
        assert await engine.balance() == 9_900

        await engine.rounds.record_end_price(0, engine.price_process.current_price + 50)
        ticks.tick = 21
        pools = engine.rounds.ensure_round(0).without_stake(Direction.UP, 100)
        expected = engine.payout.compute(100, Direction.UP, pools)

        (settled,) = await engine.list_bets()
        assert settled.won is True
        assert settled.payout == pytest.approx(expected)
        (claimable,) = await engine.claimable()
        assert claimable.round_id == 0

        receipt = await engine.claim(0)
        assert receipt.tx_id.startswith(f"claim_{FROZEN_MS}_")
        assert receipt.amount == pytest.approx(expected)
        assert await engine.balance() == pytest.approx(9_900 + expected)

        with pytest.raises(NoClaimableWinningsError):
            await engine.claim(0)
        stats = await engine.stats()
        assert (stats.total_bets, stats.total_wins, stats.win_rate) == (1, 1, 100.0)

    async def test_quote_includes_pools(self, engine: EngineCore) -> None:
        quote = await engine.quote(Direction.DOWN, 100)
        round_ = await engine.current_round()
        assert quote.expected_payout == pytest.approx(
            engine.payout.compute(100, Direction.DOWN, round_)
        )

    async def test_balance_listener(self, engine: EngineCore) -> None:
        calls: list[int] = []
        engine.subscribe_balance(lambda: calls.append(1))
        await engine.connect_demo()
        await engine.place_bet(Direction.DOWN, 10)
        assert len(calls) == 2

    async def test_reset_demo(self, engine: EngineCore) -> None:
        await engine.connect_demo()
        await engine.place_bet(Direction.UP, 100)
        await engine.refresh_price()
        await engine.reset_demo()
        assert engine.session.connected is False
        await engine.connect_demo()
        assert await engine.balance() == 10_000
        assert await engine.list_bets() == []
        assert (await engine.price()).history == []


class TestRestart:
    async def test_state_survives_rebuild(
        self, engine: EngineCore, store: PersistenceLayer, ticks: ManualTickSource
    ) -> None:
        await engine.connect_demo()
        await engine.place_bet(Direction.DOWN, 250)
        await engine.observe()

        rebuilt = make_engine(store, ticks)
        await rebuilt.initialize()
        assert rebuilt.session.demo_mode is True
        assert await rebuilt.balance() == 9_750
        (bet,) = await rebuilt.list_bets()
        assert bet.amount == 250
        assert rebuilt.rounds.recorded_prices(0).start_price is not None

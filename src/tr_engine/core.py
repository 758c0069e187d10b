"""The parts both engines share.

Owns the wiring of PriceProcess, RoundClock, RoundStore, BetLedger and
SessionStore, and the observation step that records round prices:

  observe():
    1. read the (monotonic) tick
    2. record the current price as start price of the active round (write-once)
    3. record the current price as end price of every started round that has
       completed since the last observation

Subclasses decide where balances live and how wagers and claims move funds.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from src.tr_account.domain.events import BalanceListener
from src.tr_account.domain.session import Session, SessionStore
from src.tr_bet.domain.ledger import BetLedger
from src.tr_bet.domain.models import Bet, ClaimableWinning, UserStats
from src.tr_bet.domain.payout import PayoutEngine, PayoutQuote
from src.tr_common.enums import Direction
from src.tr_engine.interface import ClaimReceipt
from src.tr_persistence.layer import PersistenceLayer
from src.tr_price.domain.models import PriceSnapshot
from src.tr_price.domain.process import PriceProcess
from src.tr_round.domain.clock import RoundClock
from src.tr_round.domain.models import Round
from src.tr_round.domain.store import RoundStore

logger = logging.getLogger(__name__)


@dataclass
class EngineParts:
    store: PersistenceLayer
    clock: RoundClock
    price: PriceProcess
    rounds: RoundStore
    bets: BetLedger
    payout: PayoutEngine
    sessions: SessionStore


class EngineCore:
    simulation: bool = True

    def __init__(self, core: EngineParts) -> None:
        self.store = core.store
        self.clock = core.clock
        self.price_process = core.price
        self.rounds = core.rounds
        self.bets = core.bets
        self.payout = core.payout
        self.sessions = core.sessions
        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Load every component from storage once. Safe to call repeatedly."""
        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return
            await self.price_process.load()
            await self.rounds.load()
            await self.bets.load()
            await self.sessions.load()
            await self._load_extra()
            self._initialized = True
            logger.info("%s initialized", type(self).__name__)

    async def _load_extra(self) -> None:
        pass

    # ------------------------------------------------------------------
    # Observation & price
    # ------------------------------------------------------------------

    async def observe(self) -> Round:
        tick = await self.clock.current_tick()
        round_id = self.clock.round_id_for(tick)
        current_price = self.price_process.current_price
        await self.rounds.record_start_price(round_id, current_price)
        await self.rounds.close_completed(tick, current_price)
        return self.rounds.ensure_round(round_id, tick)

    async def refresh_price(self) -> PriceSnapshot:
        await self.price_process.advance(self.clock.last_tick)
        return self.price_process.snapshot()

    async def price(self) -> PriceSnapshot:
        return self.price_process.snapshot()

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------

    async def current_round(self) -> Round:
        return await self.observe()

    async def get_round(self, round_id: int) -> Round:
        await self.observe()
        return self.rounds.ensure_round(round_id, self.clock.last_tick)

    async def rounds_history(self, limit: int) -> list[Round]:
        await self.observe()
        return self.rounds.history(self.clock.last_tick, limit)

    async def quote(self, direction: Direction, amount: float) -> PayoutQuote:
        self.bets.validate_amount(amount)
        round_ = await self.observe()
        return self.payout.quote(amount, direction, round_)

    # ------------------------------------------------------------------
    # Bets (read side)
    # ------------------------------------------------------------------

    async def list_bets(self) -> list[Bet]:
        address = self.sessions.require_address()
        round_ = await self.observe()
        return await self.bets.list_for(address, round_.id)

    async def claimable(self) -> list[ClaimableWinning]:
        address = self.sessions.require_address()
        round_ = await self.observe()
        return await self.bets.claimable_for(address, round_.id)

    async def stats(self) -> UserStats:
        address = self.sessions.require_address()
        round_ = await self.observe()
        return await self.bets.stats_for(address, round_.id)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self.sessions.session

    async def connect(self, address: str) -> Session:
        return await self.sessions.connect(address)

    async def disconnect(self) -> None:
        await self.sessions.disconnect()

    # Implemented by SimulationEngine / LedgerEngine

    def subscribe_balance(self, listener: BalanceListener) -> Callable[[], None]:
        raise NotImplementedError

    async def balance(self) -> float:
        raise NotImplementedError

    async def place_bet(self, direction: Direction, amount: float) -> Bet:
        raise NotImplementedError

    async def claim(self, round_id: int) -> ClaimReceipt:
        raise NotImplementedError

    async def connect_demo(self) -> Session:
        raise NotImplementedError

    async def reset_demo(self) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        await self.store.close()

    async def _reset_shared(self) -> None:
        await self.price_process.reset()
        await self.rounds.reset()
        await self.bets.reset()
        await self.sessions.disconnect()

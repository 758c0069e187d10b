"""SimulationEngine: everything local, no ledger network involved.

Balances live in BalanceLedger; a wager debits it on placement and a claim
credits it. Pools are simulated by RoundStore.
"""

import logging
import random
from collections.abc import Callable

from src.tr_account.domain.events import BalanceListener
from src.tr_account.domain.ledger import BalanceLedger
from src.tr_account.domain.session import Session
from src.tr_bet.domain.models import Bet
from src.tr_common.datetime_utils import now_ms
from src.tr_common.enums import Direction
from src.tr_common.id_generator import make_tx_id
from src.tr_engine.core import EngineCore, EngineParts
from src.tr_engine.interface import ClaimReceipt

logger = logging.getLogger(__name__)


class SimulationEngine(EngineCore):
    simulation = True

    def __init__(
        self,
        core: EngineParts,
        balances: BalanceLedger,
        demo_address: str,
        rng: random.Random,
        time_ms: Callable[[], int] = now_ms,
    ) -> None:
        super().__init__(core)
        self.balances = balances
        self._demo_address = demo_address
        self._rng = rng
        self._time_ms = time_ms

    async def _load_extra(self) -> None:
        await self.balances.load()

    async def balance(self) -> float:
        address = self.sessions.require_address()
        return self.balances.balance_of(address)

    def subscribe_balance(self, listener: BalanceListener) -> Callable[[], None]:
        return self.balances.subscribe(listener)

    async def connect(self, address: str) -> Session:
        session = await self.sessions.connect(address)
        await self.balances.open_account(address)
        return session

    async def connect_demo(self) -> Session:
        session = await self.sessions.connect(self._demo_address, demo_mode=True)
        await self.balances.open_account(self._demo_address)
        return session

    async def place_bet(self, direction: Direction, amount: float) -> Bet:
        address = self.sessions.require_address()
        round_ = await self.observe()
        return await self.bets.place(address, direction, amount, round_.id)

    async def claim(self, round_id: int) -> ClaimReceipt:
        address = self.sessions.require_address()
        current = await self.observe()
        amount = await self.bets.claim(address, round_id, current.id)
        tx_id = make_tx_id("claim", self._time_ms(), self._rng)
        return ClaimReceipt(tx_id=tx_id, round_id=round_id, amount=amount)

    async def reset_demo(self) -> None:
        await self._reset_shared()
        await self.balances.reset()
        logger.info("Demo state reset")

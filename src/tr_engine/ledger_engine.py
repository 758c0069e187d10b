"""LedgerEngine: ticks, balances and fund movements go through a LedgerClient.

Wagers and claims are broadcast first; the local BetLedger only records what
the network accepted. Pools are aggregated from the wagers recorded here, and
settlement uses the same locally recorded round prices as the simulation.
"""

import logging
from collections.abc import Callable

from src.tr_account.domain.events import BalanceEvents, BalanceListener
from src.tr_account.domain.session import Session
from src.tr_bet.domain.models import Bet
from src.tr_common.enums import Direction
from src.tr_common.errors import DemoUnavailableError, InsufficientBalanceError, LedgerBroadcastError
from src.tr_engine.core import EngineCore, EngineParts
from src.tr_engine.interface import ClaimReceipt
from src.tr_ledger.domain.client import LedgerClient, TxResult

logger = logging.getLogger(__name__)


class LedgerEngine(EngineCore):
    simulation = False

    def __init__(self, core: EngineParts, client: LedgerClient) -> None:
        super().__init__(core)
        self.client = client
        self.events = BalanceEvents()

    async def balance(self) -> float:
        address = self.sessions.require_address()
        return await self.client.get_balance(address)

    def subscribe_balance(self, listener: BalanceListener) -> Callable[[], None]:
        return self.events.subscribe(listener)

    async def connect_demo(self) -> Session:
        raise DemoUnavailableError()

    async def place_bet(self, direction: Direction, amount: float) -> Bet:
        address = self.sessions.require_address()
        self.bets.validate_amount(amount)
        available = await self.client.get_balance(address)
        if amount > available:
            raise InsufficientBalanceError(amount, available)
        round_ = await self.observe()
        result = await self.client.broadcast_wager(address, direction, amount, round_.id)
        if not result.success:
            raise LedgerBroadcastError(result.message or "wager rejected")
        bet = await self.bets.record(address, direction, amount, round_.id, result.tx_id)
        self.events.publish()
        logger.info("Wager %s broadcast for %s on round %d", result.tx_id, address, round_.id)
        return bet

    async def claim(self, round_id: int) -> ClaimReceipt:
        address = self.sessions.require_address()
        current = await self.observe()

        async def broadcast(bet: Bet) -> TxResult:
            result = await self.client.broadcast_claim(address, round_id)
            if not result.success:
                raise LedgerBroadcastError(result.message or "claim rejected")
            return result

        bet, result = await self.bets.claim_with(address, round_id, current.id, broadcast)
        self.events.publish()
        return ClaimReceipt(tx_id=result.tx_id, round_id=round_id, amount=bet.payout or 0.0)

    async def reset_demo(self) -> None:
        raise DemoUnavailableError()

    async def close(self) -> None:
        await super().close()
        await self.client.close()

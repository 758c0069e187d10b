"""The one interface the HTTP layer and the ticker use.

Two implementations, chosen once by `build_engine`:
  - SimulationEngine: local balances, simulated pools, wall-clock ticks
  - LedgerEngine: ticks, balances and fund movements go through a LedgerClient
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from src.tr_account.domain.events import BalanceListener
from src.tr_account.domain.session import Session
from src.tr_bet.domain.models import Bet, ClaimableWinning, UserStats
from src.tr_bet.domain.payout import PayoutQuote
from src.tr_common.enums import Direction
from src.tr_price.domain.models import PriceSnapshot
from src.tr_round.domain.models import Round


@dataclass(frozen=True)
class ClaimReceipt:
    tx_id: str
    round_id: int
    amount: float


class SettlementEngine(Protocol):
    simulation: bool

    async def initialize(self) -> None: ...

    async def observe(self) -> Round: ...

    async def refresh_price(self) -> PriceSnapshot: ...

    async def price(self) -> PriceSnapshot: ...

    async def current_round(self) -> Round: ...

    async def get_round(self, round_id: int) -> Round: ...

    async def rounds_history(self, limit: int) -> list[Round]: ...

    async def quote(self, direction: Direction, amount: float) -> PayoutQuote: ...

    async def place_bet(self, direction: Direction, amount: float) -> Bet: ...

    async def list_bets(self) -> list[Bet]: ...

    async def claimable(self) -> list[ClaimableWinning]: ...

    async def claim(self, round_id: int) -> ClaimReceipt: ...

    async def stats(self) -> UserStats: ...

    async def balance(self) -> float: ...

    def subscribe_balance(self, listener: BalanceListener) -> Callable[[], None]: ...

    @property
    def session(self) -> Session: ...

    async def connect(self, address: str) -> Session: ...

    async def connect_demo(self) -> Session: ...

    async def disconnect(self) -> None: ...

    async def reset_demo(self) -> None: ...

    async def close(self) -> None: ...

"""Append-only wager records per address, with lazy settlement.

Settlement happens on read. `list_for` resolves every pending bet whose round
is strictly before the current round:
  - recorded start and end price: won = (direction == UP) == (end > start)
  - start recorded, end not yet: stays pending until the round is closed
  - no start price (round never observed while active): fallback draw
    `rng.random() < fallback_win_probability` when the fallback is enabled,
    otherwise the bet stays pending
Winning bets get the pari-mutuel payout against the round's pools with their
own stake removed; losing bets get 0. A resolved bet is never recomputed.
`load` replays every stored stake into RoundStore so pools survive a restart.

All mutations of one address run under that address's asyncio.Lock, so a
balance check and the matching debit cannot interleave with another request.
"""

import asyncio
import logging
import random
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import TypeVar

from src.tr_account.domain.ledger import BalanceLedger
from src.tr_bet.domain.models import Bet, ClaimableWinning, UserStats
from src.tr_bet.domain.payout import PayoutEngine
from src.tr_common.amounts import is_finite_number
from src.tr_common.datetime_utils import now_ms
from src.tr_common.enums import Direction
from src.tr_common.errors import (
    BetValidationError,
    CorruptedValueError,
    InsufficientBalanceError,
    InternalError,
    NoClaimableWinningsError,
)
from src.tr_common.id_generator import make_tx_id
from src.tr_persistence.domain import keys
from src.tr_persistence.layer import PersistenceLayer
from src.tr_round.domain.clock import RoundClock
from src.tr_round.domain.store import RoundStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BetLedger:
    def __init__(
        self,
        store: PersistenceLayer,
        rounds: RoundStore,
        clock: RoundClock,
        payout: PayoutEngine,
        rng: random.Random,
        min_bet: float,
        max_bet: float,
        balances: BalanceLedger | None = None,
        fallback_enabled: bool = True,
        fallback_win_probability: float = 0.5,
        time_ms: Callable[[], int] = now_ms,
    ) -> None:
        if not (0 < min_bet <= max_bet):
            raise ValueError(f"invalid bet bounds [{min_bet}, {max_bet}]")
        self._store = store
        self._rounds = rounds
        self._clock = clock
        self._payout = payout
        self._rng = rng
        self.min_bet = min_bet
        self.max_bet = max_bet
        self._balances = balances
        self._fallback_enabled = fallback_enabled
        self._fallback_win_probability = fallback_win_probability
        self._time_ms = time_ms
        self._bets: dict[str, list[Bet]] = {}
        self._ids: set[str] = set()
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def load(self) -> None:
        raw = await self._store.load(keys.BETS)
        if not isinstance(raw, dict):
            return
        dropped = 0
        for address, records in raw.items():
            if not isinstance(records, list):
                dropped += 1
                continue
            bets = []
            for record in records:
                try:
                    bet = Bet.from_dict(record)
                except CorruptedValueError as exc:
                    logger.warning("Dropping stored bet: %s", exc.message)
                    dropped += 1
                    continue
                if bet.id in self._ids:
                    continue
                self._ids.add(bet.id)
                bets.append(bet)
            self._bets[address] = bets
        await self._rounds.add_stakes(
            (b.round_id, b.direction, b.amount) for bets in self._bets.values() for b in bets
        )
        if dropped:
            await self._save()

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def validate_amount(self, amount: float) -> None:
        if not is_finite_number(amount):
            raise BetValidationError(f"amount must be a number, got {amount!r}")
        if amount < self.min_bet or amount > self.max_bet:
            raise BetValidationError(
                f"amount must be between {self.min_bet:g} and {self.max_bet:g}, got {amount:g}"
            )

    async def place(
        self,
        address: str,
        direction: Direction,
        amount: float,
        current_round_id: int,
    ) -> Bet:
        """Validate, debit the wager and append an unresolved bet."""
        if self._balances is None:
            raise InternalError("BetLedger has no BalanceLedger to debit")
        self.validate_amount(amount)
        async with self._locks[address]:
            available = self._balances.balance_of(address)
            if amount > available:
                raise InsufficientBalanceError(amount, available)
            await self._balances.debit(address, amount)
            bet = await self._append(address, direction, amount, current_round_id, None)
        logger.info(
            "Bet %s placed: %s %s %.2f on round %d",
            bet.id, address, direction.value, amount, current_round_id,
        )
        return bet

    async def record(
        self,
        address: str,
        direction: Direction,
        amount: float,
        round_id: int,
        bet_id: str,
    ) -> Bet:
        """Append a bet whose funds already moved elsewhere (ledger network)."""
        self.validate_amount(amount)
        async with self._locks[address]:
            return await self._append(address, direction, amount, round_id, bet_id)

    async def _append(
        self,
        address: str,
        direction: Direction,
        amount: float,
        round_id: int,
        bet_id: str | None,
    ) -> Bet:
        timestamp = self._time_ms()
        if bet_id is None or bet_id in self._ids:
            bet_id = make_tx_id("sim", timestamp, self._rng)
            while bet_id in self._ids:
                bet_id = make_tx_id("sim", timestamp, self._rng)
        bet = Bet(
            id=bet_id,
            round_id=round_id,
            address=address,
            direction=direction,
            amount=amount,
            placed_at=timestamp,
        )
        self._bets.setdefault(address, []).append(bet)
        self._ids.add(bet_id)
        await self._rounds.add_stake(round_id, direction, amount)
        await self._save()
        return bet

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    async def list_for(self, address: str, current_round_id: int | None = None) -> list[Bet]:
        if current_round_id is None:
            current_round_id = await self._clock.current_round_id()
        async with self._locks[address]:
            await self._resolve_pending(address, current_round_id)
            return list(self._bets.get(address, []))

    async def _resolve_pending(self, address: str, current_round_id: int) -> None:
        changed = False
        for bet in self._bets.get(address, []):
            if bet.resolved or bet.round_id >= current_round_id:
                continue
            changed = self._resolve(bet) or changed
        if changed:
            await self._save()

    def _resolve(self, bet: Bet) -> bool:
        prices = self._rounds.recorded_prices(bet.round_id)
        if prices.start_price is not None:
            if prices.end_price is None:
                return False
            won = (bet.direction is Direction.UP) == (prices.end_price > prices.start_price)
        else:
            if not self._fallback_enabled:
                return False
            won = self._rng.random() < self._fallback_win_probability
            logger.warning(
                "Round %d has no recorded prices; bet %s settled by fallback draw (won=%s)",
                bet.round_id, bet.id, won,
            )
        bet.won = won
        if won:
            round_ = self._rounds.ensure_round(bet.round_id)
            bet.payout = self._payout.compute(
                bet.amount, bet.direction, round_.without_stake(bet.direction, bet.amount)
            )
        else:
            bet.payout = 0.0
        logger.info("Bet %s resolved: won=%s payout=%.2f", bet.id, won, bet.payout)
        return True

    async def claimable_for(
        self, address: str, current_round_id: int | None = None
    ) -> list[ClaimableWinning]:
        bets = await self.list_for(address, current_round_id)
        return [
            ClaimableWinning(round_id=b.round_id, amount=b.payout or 0.0, direction=b.direction)
            for b in bets
            if b.claimable
        ]

    async def stats_for(self, address: str, current_round_id: int | None = None) -> UserStats:
        return UserStats.from_bets(await self.list_for(address, current_round_id))

    # ------------------------------------------------------------------
    # Claims
    # ------------------------------------------------------------------

    def _find_claimable(self, address: str, round_id: int) -> Bet:
        for bet in self._bets.get(address, []):
            if bet.round_id == round_id and bet.claimable:
                return bet
        raise NoClaimableWinningsError(round_id)

    async def claim_with(
        self,
        address: str,
        round_id: int,
        current_round_id: int,
        broadcast: Callable[[Bet], Awaitable[T]],
    ) -> tuple[Bet, T]:
        """Claim the round's winning bet after `broadcast` succeeds, without moving funds.

        The check, the broadcast and the mark run under the address lock, so a
        second claim for the same round waits and then finds nothing to claim.
        If `broadcast` raises, the bet stays claimable.
        """
        async with self._locks[address]:
            await self._resolve_pending(address, current_round_id)
            bet = self._find_claimable(address, round_id)
            result = await broadcast(bet)
            bet.claimed = True
            await self._save()
        logger.info("Bet %s claimed by %s on the ledger", bet.id, address)
        return bet, result

    async def claim(
        self, address: str, round_id: int, current_round_id: int | None = None
    ) -> float:
        """Mark the round's winning bet claimed and credit its payout."""
        if self._balances is None:
            raise InternalError("BetLedger has no BalanceLedger to credit")
        if current_round_id is None:
            current_round_id = await self._clock.current_round_id()
        async with self._locks[address]:
            await self._resolve_pending(address, current_round_id)
            bet = self._find_claimable(address, round_id)
            bet.claimed = True
            await self._save()
            amount = bet.payout or 0.0
            await self._balances.credit(address, amount)
        logger.info("Bet %s claimed by %s: %.2f", bet.id, address, amount)
        return amount

    async def reset(self) -> None:
        self._bets.clear()
        self._ids.clear()
        await self._store.delete(keys.BETS)

    async def _save(self) -> None:
        await self._store.save(
            keys.BETS,
            {address: [b.to_dict() for b in bets] for address, bets in self._bets.items()},
        )

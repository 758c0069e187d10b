"""RoundStore owns every round record.

Pools:
  - simulated: first access draws a base pool in [10000, 60000) and puts 30–70%
    of it on UP. The base split of a round that took a stake is persisted under
    `round_pools`, so the same split comes back after a restart.
  - aggregated: pools start at zero and grow only through `add_stake`.
  Placement always adds the bettor's own stake through `add_stake`. Stakes are
  not stored here; BetLedger replays them from the stored bets on load.
  Rounds after the current one are returned with empty pools and nothing is
  kept for them until they start or take a stake.

Prices: start and end price are write-once per round id and persisted under
`round_prices`. The end price may only follow a recorded start price.
"""

import logging
import math
import random
from collections.abc import Iterable
from dataclasses import dataclass

from src.tr_common.amounts import is_finite_number
from src.tr_common.enums import Direction, RoundStatus
from src.tr_persistence.domain import keys
from src.tr_persistence.layer import PersistenceLayer
from src.tr_round.domain.clock import RoundClock
from src.tr_round.domain.models import RecordedPrices, Round

logger = logging.getLogger(__name__)

_BASE_POOL_MIN = 10_000
_BASE_POOL_SPAN = 50_000
_UP_SHARE_MIN = 0.3
_UP_SHARE_SPAN = 0.4


@dataclass
class _Pools:
    up: float = 0.0
    down: float = 0.0

    def copy(self) -> "_Pools":
        return _Pools(self.up, self.down)


class RoundStore:
    def __init__(
        self,
        store: PersistenceLayer,
        clock: RoundClock,
        rng: random.Random,
        simulate_pools: bool = True,
    ) -> None:
        self._store = store
        self._clock = clock
        self._rng = rng
        self._simulate_pools = simulate_pools
        self._pools: dict[int, _Pools] = {}
        self._bases: dict[int, _Pools] = {}
        self._prices: dict[int, RecordedPrices] = {}

    async def load(self) -> None:
        await self._load_prices()
        await self._load_bases()

    async def _load_prices(self) -> None:
        raw = await self._store.load(keys.ROUND_PRICES)
        if not isinstance(raw, dict):
            return
        for key, value in raw.items():
            try:
                round_id = int(key)
            except (TypeError, ValueError):
                continue
            if not isinstance(value, dict):
                continue
            start = value.get("start_price")
            end = value.get("end_price")
            start = float(start) if is_finite_number(start) else None
            end = float(end) if is_finite_number(end) and start is not None else None
            if start is not None:
                self._prices[round_id] = RecordedPrices(start_price=start, end_price=end)

    async def _load_bases(self) -> None:
        raw = await self._store.load(keys.ROUND_POOLS)
        if not isinstance(raw, dict):
            return
        for key, value in raw.items():
            try:
                round_id = int(key)
            except (TypeError, ValueError):
                continue
            if not isinstance(value, dict):
                continue
            up, down = value.get("up"), value.get("down")
            if is_finite_number(up) and is_finite_number(down) and up >= 0 and down >= 0:
                self._bases[round_id] = _Pools(up=float(up), down=float(down))

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------

    def ensure_round(self, round_id: int, tick: int | None = None) -> Round:
        """Return the round snapshot, creating its pool record on first access.

        Rounds after the current one get empty pools that are not kept.
        """
        if tick is None:
            tick = self._clock.last_tick
        start_tick, end_tick = self._clock.bounds_for(round_id)
        pools = self._pools.get(round_id)
        if pools is None:
            if round_id > self._clock.round_id_for(tick):
                pools = _Pools()
            else:
                pools = self._pools[round_id] = self._new_pools(round_id)
        status = self._clock.status_for(round_id, tick)
        prices = self._prices.get(round_id, RecordedPrices())
        completed = status is RoundStatus.COMPLETED
        return Round(
            id=round_id,
            start_tick=start_tick,
            end_tick=end_tick,
            start_price=prices.start_price,
            end_price=prices.end_price if completed else None,
            result=prices.result if completed else None,
            up_pool=pools.up,
            down_pool=pools.down,
            status=status,
        )

    def _new_pools(self, round_id: int) -> _Pools:
        base = self._bases.get(round_id)
        if base is not None:
            return base.copy()
        if not self._simulate_pools:
            return _Pools()
        total = math.floor(self._rng.random() * _BASE_POOL_SPAN) + _BASE_POOL_MIN
        up = math.floor(total * (_UP_SHARE_MIN + self._rng.random() * _UP_SHARE_SPAN))
        return _Pools(up=float(up), down=float(total - up))

    async def add_stake(self, round_id: int, direction: Direction, amount: float) -> Round:
        await self.add_stakes([(round_id, direction, amount)])
        return self.ensure_round(round_id)

    async def add_stakes(self, stakes: Iterable[tuple[int, Direction, float]]) -> None:
        """Add stakes to their rounds' pools.

        The simulated base split of a round is pinned and saved before its
        first stake lands on it.
        """
        pinned = False
        for round_id, direction, amount in stakes:
            pools = self._pools.get(round_id)
            if pools is None:
                pools = self._pools[round_id] = self._new_pools(round_id)
            if self._simulate_pools and round_id not in self._bases:
                self._bases[round_id] = pools.copy()
                pinned = True
            if direction is Direction.UP:
                pools.up += amount
            else:
                pools.down += amount
        if pinned:
            await self._save_bases()

    def history(self, current_tick: int, limit: int) -> list[Round]:
        """Up to `limit` completed rounds before the current one, newest first."""
        current_id = self._clock.round_id_for(current_tick)
        rounds = []
        for round_id in range(current_id - 1, max(current_id - 1 - limit, -1), -1):
            rounds.append(self.ensure_round(round_id, current_tick))
        return rounds

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------

    def recorded_prices(self, round_id: int) -> RecordedPrices:
        prices = self._prices.get(round_id)
        if prices is None:
            return RecordedPrices()
        return RecordedPrices(prices.start_price, prices.end_price)

    async def record_start_price(self, round_id: int, price: float) -> bool:
        """Record once; later calls are no-ops. Returns True when recorded."""
        if round_id in self._prices:
            return False
        self._prices[round_id] = RecordedPrices(start_price=price)
        await self._save()
        logger.debug("Round %d start price %.4f", round_id, price)
        return True

    async def record_end_price(self, round_id: int, price: float) -> bool:
        prices = self._prices.get(round_id)
        if prices is None or prices.start_price is None:
            logger.warning(
                "End price for round %d without a start price, not recorded", round_id
            )
            return False
        if prices.end_price is not None:
            return False
        prices.end_price = price
        await self._save()
        logger.info(
            "Round %d closed: %.4f -> %.4f (%s)",
            round_id, prices.start_price, price, prices.result.value,
        )
        return True

    async def close_completed(self, tick: int, price: float) -> list[int]:
        """Record `price` as end price of every started round whose end_tick <= tick."""
        closed = []
        for round_id in sorted(self._prices):
            prices = self._prices[round_id]
            if prices.end_price is not None:
                continue
            if self._clock.status_for(round_id, tick) is RoundStatus.COMPLETED:
                if await self.record_end_price(round_id, price):
                    closed.append(round_id)
        return closed

    async def reset(self) -> None:
        self._pools.clear()
        self._bases.clear()
        self._prices.clear()
        await self._store.delete(keys.ROUND_PRICES)
        await self._store.delete(keys.ROUND_POOLS)

    async def _save(self) -> None:
        await self._store.save(
            keys.ROUND_PRICES,
            {
                str(round_id): {"start_price": p.start_price, "end_price": p.end_price}
                for round_id, p in self._prices.items()
            },
        )

    async def _save_bases(self) -> None:
        await self._store.save(
            keys.ROUND_POOLS,
            {str(round_id): {"up": p.up, "down": p.down} for round_id, p in self._bases.items()},
        )

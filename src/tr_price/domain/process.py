"""Synthetic asset price as a damped random walk.

Per step:
    velocity = clamp(velocity * 0.95 + U(-force, +force), ±max_velocity)
    price    = clamp(price + velocity, [price_min, price_max])

History is a FIFO of the last `history_size` PricePoints. It feeds display and
statistics only; settlement reads the prices RoundStore recorded.
Persisted: the scalar price and the history. Velocity restarts at 0.
"""

import logging
import random
from collections import deque

from src.tr_common.amounts import is_finite_number
from src.tr_persistence.domain import keys
from src.tr_persistence.layer import PersistenceLayer
from src.tr_price.domain.models import PricePoint, PriceSnapshot

logger = logging.getLogger(__name__)

DAMPING = 0.95


class PriceProcess:
    def __init__(
        self,
        store: PersistenceLayer,
        rng: random.Random,
        initial_price: float = 2500.0,
        price_min: float = 1000.0,
        price_max: float = 5000.0,
        force: float = 1.0,
        max_velocity: float = 5.0,
        history_size: int = 50,
    ) -> None:
        if not (0 < price_min <= initial_price <= price_max):
            raise ValueError(
                f"initial price {initial_price} outside band [{price_min}, {price_max}]"
            )
        self._store = store
        self._rng = rng
        self._initial_price = initial_price
        self._min = price_min
        self._max = price_max
        self._force = force
        self._max_velocity = max_velocity
        self._price = initial_price
        self._velocity = 0.0
        self._history: deque[PricePoint] = deque(maxlen=history_size)

    @property
    def current_price(self) -> float:
        return self._price

    @property
    def velocity(self) -> float:
        return self._velocity

    def history(self) -> list[PricePoint]:
        return list(self._history)

    async def load(self) -> None:
        stored = await self._store.load(keys.PRICE)
        if is_finite_number(stored) and self._min <= stored <= self._max:
            self._price = float(stored)
        elif stored is not None:
            logger.warning("Ignoring stored price %r, using %s", stored, self._initial_price)

        raw_history = await self._store.load(keys.PRICE_HISTORY)
        if isinstance(raw_history, list):
            for item in raw_history:
                if (
                    isinstance(item, dict)
                    and is_finite_number(item.get("value"))
                    and isinstance(item.get("at_tick"), int)
                ):
                    self._history.append(
                        PricePoint(value=float(item["value"]), at_tick=item["at_tick"])
                    )

    def step(self, at_tick: int) -> float:
        """Advance one step in memory. Use `advance` to also persist."""
        force = self._rng.uniform(-self._force, self._force)
        velocity = self._velocity * DAMPING + force
        self._velocity = max(-self._max_velocity, min(self._max_velocity, velocity))
        self._price = max(self._min, min(self._max, self._price + self._velocity))
        self._history.append(PricePoint(value=self._price, at_tick=at_tick))
        return self._price

    async def advance(self, at_tick: int) -> float:
        price = self.step(at_tick)
        await self._save()
        logger.debug("Price advanced to %.4f at tick %d", price, at_tick)
        return price

    def change_over_window(self) -> float:
        """Percentage change from the oldest retained sample to the current price."""
        if not self._history:
            return 0.0
        oldest = self._history[0].value
        if oldest == 0:
            return 0.0
        return (self._price - oldest) / oldest * 100

    def snapshot(self) -> PriceSnapshot:
        return PriceSnapshot(
            price=self._price,
            change_pct=self.change_over_window(),
            history=self.history(),
        )

    async def reset(self) -> None:
        self._price = self._initial_price
        self._velocity = 0.0
        self._history.clear()
        await self._store.delete(keys.PRICE)
        await self._store.delete(keys.PRICE_HISTORY)

    async def _save(self) -> None:
        await self._store.save(keys.PRICE, self._price)
        await self._store.save(
            keys.PRICE_HISTORY,
            [{"value": p.value, "at_tick": p.at_tick} for p in self._history],
        )

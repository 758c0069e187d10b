"""Domain models for tr_round (pure dataclasses, no storage dependency)."""

from dataclasses import dataclass, replace

from src.tr_common.enums import Direction, RoundStatus


@dataclass
class Round:
    id: int
    start_tick: int
    end_tick: int               # exclusive: start_tick + round_duration
    start_price: float | None
    end_price: float | None     # None until status == COMPLETED
    result: Direction | None    # None until status == COMPLETED
    up_pool: float
    down_pool: float
    status: RoundStatus

    @property
    def total_pool(self) -> float:
        return self.up_pool + self.down_pool

    def pool_for(self, direction: Direction) -> float:
        return self.up_pool if direction is Direction.UP else self.down_pool

    def without_stake(self, direction: Direction, amount: float) -> "Round":
        """Copy of this round with `amount` taken back out of `direction`'s pool."""
        if direction is Direction.UP:
            return replace(self, up_pool=max(self.up_pool - amount, 0.0))
        return replace(self, down_pool=max(self.down_pool - amount, 0.0))


@dataclass
class RecordedPrices:
    start_price: float | None = None
    end_price: float | None = None

    @property
    def result(self) -> Direction | None:
        if self.start_price is None or self.end_price is None:
            return None
        return Direction.UP if self.end_price > self.start_price else Direction.DOWN

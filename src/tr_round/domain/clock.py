"""RoundClock: tick counter to round id / bounds / status.

Rounds are half-open tick ranges: round n covers [n*d, (n+1)*d). A round is
ACTIVE while the current tick is inside its range, COMPLETED once the tick
reaches end_tick, PENDING before start_tick. Exactly one round is active at any
tick. The clock never reports a lower tick than it already reported, so a round
status can only move forward.
"""

import logging
from collections.abc import Callable
from typing import Protocol

from src.tr_common.datetime_utils import now_ms
from src.tr_common.enums import RoundStatus
from src.tr_common.errors import InvalidRoundError

logger = logging.getLogger(__name__)


class TickSource(Protocol):
    async def current_tick(self) -> int: ...


class WallClockTickSource:
    """Ticks derived from wall time: (now - epoch) // tick_duration."""

    def __init__(
        self,
        tick_duration_ms: int,
        epoch_ms: int,
        time_ms: Callable[[], int] = now_ms,
    ) -> None:
        if tick_duration_ms <= 0:
            raise ValueError("tick_duration_ms must be positive")
        self._tick_duration_ms = tick_duration_ms
        self._epoch_ms = epoch_ms
        self._time_ms = time_ms

    def tick_at(self, timestamp_ms: int) -> int:
        return max(0, (timestamp_ms - self._epoch_ms) // self._tick_duration_ms)

    async def current_tick(self) -> int:
        return self.tick_at(self._time_ms())


class ManualTickSource:
    """Tick source moved by hand, for replays and deterministic tests."""

    def __init__(self, tick: int = 0) -> None:
        self.tick = tick

    def advance(self, ticks: int = 1) -> int:
        self.tick += ticks
        return self.tick

    async def current_tick(self) -> int:
        return self.tick


class RoundClock:
    def __init__(self, source: TickSource, round_duration: int) -> None:
        if round_duration <= 0:
            raise ValueError("round_duration must be positive")
        self._source = source
        self.round_duration = round_duration
        self._last_tick = 0

    @property
    def last_tick(self) -> int:
        """Highest tick reported so far (no I/O)."""
        return self._last_tick

    async def current_tick(self) -> int:
        tick = await self._source.current_tick()
        if tick < self._last_tick:
            logger.debug("Tick source went back %d -> %d, holding", self._last_tick, tick)
            return self._last_tick
        self._last_tick = tick
        return tick

    async def current_round_id(self) -> int:
        return self.round_id_for(await self.current_tick())

    def round_id_for(self, tick: int) -> int:
        return tick // self.round_duration

    def bounds_for(self, round_id: int) -> tuple[int, int]:
        """[start_tick, end_tick) of the round."""
        if round_id < 0:
            raise InvalidRoundError(round_id)
        start = round_id * self.round_duration
        return start, start + self.round_duration

    def status_for(self, round_id: int, tick: int) -> RoundStatus:
        start, end = self.bounds_for(round_id)
        if tick >= end:
            return RoundStatus.COMPLETED
        if tick >= start:
            return RoundStatus.ACTIVE
        return RoundStatus.PENDING

    def ticks_remaining(self, round_id: int, tick: int) -> int:
        _, end = self.bounds_for(round_id)
        return max(0, end - tick)

"""Background task that keeps rounds observed and the price moving.

Observing every tick guarantees each round gets its start price recorded while
it is active and its end price right after it completes, so settlement only
falls back to the coin flip for rounds that elapsed while the process was down.
"""

import asyncio
import logging
import time

from src.tr_common.errors import AppError
from src.tr_engine.interface import SettlementEngine

logger = logging.getLogger(__name__)


class RoundTicker:
    def __init__(
        self,
        engine: SettlementEngine,
        tick_interval: float,
        price_interval: float,
    ) -> None:
        self._engine = engine
        self._tick_interval = tick_interval
        self._price_interval = price_interval
        self._task: asyncio.Task[None] | None = None
        self._last_price_at: float | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def step(self) -> None:
        """One ticker iteration: observe, and advance the price when it is due."""
        await self._engine.observe()
        now = time.monotonic()
        if self._last_price_at is None or now - self._last_price_at >= self._price_interval:
            await self._engine.refresh_price()
            self._last_price_at = now

    async def _run(self) -> None:
        while True:
            try:
                await self.step()
            except AppError as exc:
                logger.warning("Ticker step failed: [%d] %s", exc.code, exc.message)
            except Exception:
                logger.exception("Ticker step crashed")
            await asyncio.sleep(self._tick_interval)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="round-ticker")
        logger.info(
            "Round ticker started (tick=%.2fs, price=%.2fs)",
            self._tick_interval, self._price_interval,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

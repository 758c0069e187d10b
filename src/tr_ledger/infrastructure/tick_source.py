"""Tick source backed by the ledger network, falling back to wall-clock ticks."""

import logging

from src.tr_common.errors import LedgerUnavailableError
from src.tr_ledger.domain.client import LedgerClient
from src.tr_round.domain.clock import WallClockTickSource

logger = logging.getLogger(__name__)


class LedgerTickSource:
    def __init__(self, client: LedgerClient, fallback: WallClockTickSource) -> None:
        self._client = client
        self._fallback = fallback

    async def current_tick(self) -> int:
        try:
            tick = await self._client.get_current_tick()
        except LedgerUnavailableError as exc:
            logger.warning("Using wall-clock tick: %s", exc.message)
            return await self._fallback.current_tick()
        if tick <= 0:
            return await self._fallback.current_tick()
        return tick

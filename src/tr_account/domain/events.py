"""Balance-changed notification via explicit publish/subscribe.

The signal carries no payload; subscribers re-read the balance they care about.
Publishing is fire-and-forget: a failing subscriber is logged and the rest still
run. Subscribers may be plain callables or coroutine functions.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

BalanceListener = Callable[[], None] | Callable[[], Awaitable[None]]


class BalanceEvents:
    def __init__(self) -> None:
        self._listeners: list[BalanceListener] = []
        self._pending: set[asyncio.Task[None]] = set()

    def subscribe(self, listener: BalanceListener) -> Callable[[], None]:
        """Register `listener`; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def publish(self) -> None:
        for listener in list(self._listeners):
            try:
                result = listener()
                if inspect.isawaitable(result):
                    task = asyncio.ensure_future(result)
                    self._pending.add(task)
                    task.add_done_callback(self._on_done)
            except Exception:
                logger.exception("Balance listener %r failed", listener)

    def _on_done(self, task: "asyncio.Task[None]") -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Balance listener failed", exc_info=task.exception())

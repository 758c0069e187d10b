"""Best-effort JSON persistence over a KeyValueBackend.

Policy:
  - Values are JSON-encoded; the logical key is prefixed (default "tr:").
  - A value that cannot be encoded is logged and that save is skipped.
  - StorageUnavailableError from the backend switches the layer to memory-only
    for the rest of the process. Nothing is raised to the caller.
  - Every save also lands in an in-process mirror, so a degraded layer keeps
    answering loads with the latest values written by this process.
"""

import json
import logging
from typing import Any

from src.tr_common.errors import StorageUnavailableError
from src.tr_persistence.domain.backend import KeyValueBackend

logger = logging.getLogger(__name__)


class PersistenceLayer:
    def __init__(self, backend: KeyValueBackend, prefix: str = "tr:") -> None:
        self._backend = backend
        self._prefix = prefix
        self._mirror: dict[str, str] = {}
        self._degraded = False

    @property
    def degraded(self) -> bool:
        return self._degraded

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _degrade(self, op: str, key: str, exc: StorageUnavailableError) -> None:
        if not self._degraded:
            logger.warning(
                "Storage %s failed for %s, continuing memory-only: %s",
                op, self._key(key), exc.message,
            )
        self._degraded = True

    async def load(self, key: str) -> Any | None:
        raw: str | None = None
        if not self._degraded:
            try:
                raw = await self._backend.get(self._key(key))
            except StorageUnavailableError as exc:
                self._degrade("load", key, exc)
        if raw is None:
            raw = self._mirror.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding undecodable value at %s", self._key(key))
            return None

    async def save(self, key: str, value: Any) -> None:
        try:
            raw = json.dumps(value, allow_nan=False)
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping save of %s: %s", self._key(key), exc)
            return
        self._mirror[key] = raw
        if self._degraded:
            return
        try:
            await self._backend.set(self._key(key), raw)
        except StorageUnavailableError as exc:
            self._degrade("save", key, exc)

    async def delete(self, key: str) -> None:
        self._mirror.pop(key, None)
        if self._degraded:
            return
        try:
            await self._backend.delete(self._key(key))
        except StorageUnavailableError as exc:
            self._degrade("delete", key, exc)

    async def close(self) -> None:
        try:
            await self._backend.close()
        except StorageUnavailableError as exc:
            logger.warning("Closing storage failed: %s", exc.message)

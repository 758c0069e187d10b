"""JSON-file backend: the whole keyspace lives in one file.

Each write rewrites the file via a temp file + os.replace, so a crash mid-write
leaves the previous snapshot intact. File I/O runs in a worker thread to keep
the event loop responsive.
"""

import asyncio
import json
import os
from pathlib import Path

from src.tr_common.errors import StorageUnavailableError


class JsonFileBackend:
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._cache: dict[str, str] | None = None

    async def get(self, key: str) -> str | None:
        data = await self._read()
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        data = await self._read()
        data[key] = value
        await self._write(data)

    async def delete(self, key: str) -> None:
        data = await self._read()
        if data.pop(key, None) is not None:
            await self._write(data)

    async def close(self) -> None:
        self._cache = None

    async def _read(self) -> dict[str, str]:
        if self._cache is None:
            self._cache = await asyncio.to_thread(self._read_sync)
        return self._cache

    def _read_sync(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise StorageUnavailableError(str(exc)) from exc
        except ValueError:
            # Unreadable snapshot: start empty, the next write replaces it
            return {}
        if not isinstance(raw, dict):
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    async def _write(self, data: dict[str, str]) -> None:
        await asyncio.to_thread(self._write_sync, dict(data))

    def _write_sync(self, data: dict[str, str]) -> None:
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            if self._path.parent != Path("."):
                self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(data), encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as exc:
            raise StorageUnavailableError(str(exc)) from exc

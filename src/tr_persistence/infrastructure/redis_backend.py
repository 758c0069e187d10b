"""Redis backend, plain GET/SET/DEL on string keys.

The client is created lazily from REDIS_URL (decode_responses=True) unless one
is injected, so constructing the backend never touches the network.
"""

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.tr_common.errors import StorageUnavailableError


class RedisBackend:
    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        client: aioredis.Redis | None = None,
    ) -> None:
        self._url = url
        self._client = client

    def _get_client(self) -> aioredis.Redis:
        if self._client is None:
            self._client = aioredis.from_url(self._url, decode_responses=True)
        return self._client

    async def get(self, key: str) -> str | None:
        try:
            value = await self._get_client().get(key)
        except (RedisError, OSError) as exc:
            raise StorageUnavailableError(str(exc)) from exc
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        try:
            await self._get_client().set(key, value)
        except (RedisError, OSError) as exc:
            raise StorageUnavailableError(str(exc)) from exc

    async def delete(self, key: str) -> None:
        try:
            await self._get_client().delete(key)
        except (RedisError, OSError) as exc:
            raise StorageUnavailableError(str(exc)) from exc

    async def close(self) -> None:
        if self._client is not None:
            try:
                await self._client.aclose()
            except (RedisError, OSError) as exc:
                raise StorageUnavailableError(str(exc)) from exc
            self._client = None

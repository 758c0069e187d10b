"""Unit tests for PersistenceLayer and the key-value backends."""
import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from config.settings import Settings
from src.tr_common.errors import StorageUnavailableError
from src.tr_persistence.factory import build_backend, build_persistence
from src.tr_persistence.infrastructure.file_backend import JsonFileBackend
from src.tr_persistence.infrastructure.memory_backend import InMemoryBackend
from src.tr_persistence.infrastructure.redis_backend import RedisBackend
from src.tr_persistence.layer import PersistenceLayer


class _BrokenBackend:
    def __init__(self) -> None:
        self.calls = 0

    async def get(self, key: str) -> str | None:
        self.calls += 1
        raise StorageUnavailableError("down")

    async def set(self, key: str, value: str) -> None:
        self.calls += 1
        raise StorageUnavailableError("down")

    async def delete(self, key: str) -> None:
        self.calls += 1
        raise StorageUnavailableError("down")


class TestPersistenceLayer:
    async def test_round_trip_with_prefix(self) -> None:
        backend = InMemoryBackend()
        layer = PersistenceLayer(backend)
        await layer.save("bets", {"A": [1, 2]})
        assert backend.snapshot() == {"tr:bets": '{"A": [1, 2]}'}
        assert await layer.load("bets") == {"A": [1, 2]}

    async def test_missing_key(self) -> None:
        assert await PersistenceLayer(InMemoryBackend()).load("price") is None

    async def test_unserializable_value_skipped(self) -> None:
        backend = InMemoryBackend()
        layer = PersistenceLayer(backend)
        await layer.save("price", 1.0)
        await layer.save("price", {"bad": object()})
        await layer.save("price", float("nan"))
        assert await layer.load("price") == 1.0

    async def test_undecodable_value_treated_as_missing(self) -> None:
        layer = PersistenceLayer(InMemoryBackend({"tr:price": "{not json"}))
        assert await layer.load("price") is None

    async def test_degrades_to_memory_only(self) -> None:
        backend = _BrokenBackend()
        layer = PersistenceLayer(backend)
        await layer.save("session", {"connected": True})
        assert layer.degraded
        calls = backend.calls
        assert await layer.load("session") == {"connected": True}
        await layer.save("session", {"connected": False})
        await layer.delete("price")
        assert backend.calls == calls
        assert await layer.load("session") == {"connected": False}

    async def test_failed_load_degrades(self) -> None:
        layer = PersistenceLayer(_BrokenBackend())
        assert await layer.load("bets") is None
        assert layer.degraded

    async def test_delete(self) -> None:
        backend = InMemoryBackend()
        layer = PersistenceLayer(backend, prefix="x:")
        await layer.save("k", 1)
        await layer.delete("k")
        assert await layer.load("k") is None
        assert backend.snapshot() == {}


class TestJsonFileBackend:
    async def test_persists_across_instances(self, tmp_path: Path) -> None:
        path = tmp_path / "state" / "rounds.json"
        first = JsonFileBackend(path)
        await first.set("tr:price", "2500.0")
        await first.set("tr:session", "{}")
        await first.delete("tr:session")

        second = JsonFileBackend(path)
        assert await second.get("tr:price") == "2500.0"
        assert await second.get("tr:session") is None
        assert json.loads(path.read_text()) == {"tr:price": "2500.0"}
        assert not (tmp_path / "state" / "rounds.json.tmp").exists()

    async def test_garbage_file_starts_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "rounds.json"
        path.write_text("not json at all")
        backend = JsonFileBackend(path)
        assert await backend.get("tr:price") is None
        await backend.set("tr:price", "1")
        assert json.loads(path.read_text()) == {"tr:price": "1"}

    async def test_unwritable_location_raises_storage_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        backend = JsonFileBackend(blocker / "rounds.json")
        with pytest.raises(StorageUnavailableError):
            await backend.set("tr:price", "1")


class TestRedisBackend:
    async def test_get_set_delete(self) -> None:
        client = AsyncMock()
        client.get.return_value = "2500.0"
        backend = RedisBackend(client=client)
        assert await backend.get("tr:price") == "2500.0"
        await backend.set("tr:price", "1")
        await backend.delete("tr:price")
        client.set.assert_awaited_once_with("tr:price", "1")
        client.delete.assert_awaited_once_with("tr:price")

    async def test_bytes_decoded(self) -> None:
        client = AsyncMock()
        client.get.return_value = b"{}"
        assert await RedisBackend(client=client).get("tr:session") == "{}"

    async def test_connection_error_wrapped(self) -> None:
        client = AsyncMock()
        client.get.side_effect = RedisConnectionError("refused")
        client.set.side_effect = OSError("unreachable")
        backend = RedisBackend(client=client)
        with pytest.raises(StorageUnavailableError):
            await backend.get("tr:price")
        with pytest.raises(StorageUnavailableError):
            await backend.set("tr:price", "1")

    async def test_layer_over_dead_redis_keeps_working(self) -> None:
        client = AsyncMock()
        client.set.side_effect = RedisConnectionError("refused")
        layer = PersistenceLayer(RedisBackend(client=client))
        await layer.save("price", 2600.0)
        assert layer.degraded
        assert await layer.load("price") == 2600.0

    async def test_close_through_layer(self) -> None:
        client = AsyncMock()
        layer = PersistenceLayer(RedisBackend(client=client))
        await layer.close()
        client.aclose.assert_awaited_once()

    async def test_close_failure_is_logged_not_raised(self) -> None:
        client = AsyncMock()
        client.aclose.side_effect = RedisConnectionError("gone")
        await PersistenceLayer(RedisBackend(client=client)).close()


class TestFactory:
    def test_backend_selection(self, tmp_path: Path) -> None:
        cfg = Settings(_env_file=None, STORAGE_BACKEND="memory")
        assert isinstance(build_backend(cfg), InMemoryBackend)
        cfg = Settings(_env_file=None, STORAGE_BACKEND="file", STORAGE_PATH=str(tmp_path / "s.json"))
        assert isinstance(build_backend(cfg), JsonFileBackend)
        cfg = Settings(_env_file=None, STORAGE_BACKEND="REDIS")
        assert isinstance(build_backend(cfg), RedisBackend)

    def test_unknown_backend_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_backend(Settings(_env_file=None, STORAGE_BACKEND="sqlite"))

    async def test_prefix_from_settings(self) -> None:
        layer = build_persistence(Settings(_env_file=None, STORAGE_KEY_PREFIX="demo:"))
        await layer.save("price", 1)
        assert await layer.load("price") == 1

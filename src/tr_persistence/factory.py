"""Build the configured PersistenceLayer (memory | file | redis)."""

from config.settings import Settings
from src.tr_common.enums import StorageBackend
from src.tr_persistence.domain.backend import KeyValueBackend
from src.tr_persistence.infrastructure.file_backend import JsonFileBackend
from src.tr_persistence.infrastructure.memory_backend import InMemoryBackend
from src.tr_persistence.infrastructure.redis_backend import RedisBackend
from src.tr_persistence.layer import PersistenceLayer


def build_backend(cfg: Settings) -> KeyValueBackend:
    kind = StorageBackend(cfg.STORAGE_BACKEND.lower())
    if kind is StorageBackend.FILE:
        return JsonFileBackend(cfg.STORAGE_PATH)
    if kind is StorageBackend.REDIS:
        return RedisBackend(cfg.REDIS_URL)
    return InMemoryBackend()


def build_persistence(cfg: Settings) -> PersistenceLayer:
    return PersistenceLayer(build_backend(cfg), prefix=cfg.STORAGE_KEY_PREFIX)

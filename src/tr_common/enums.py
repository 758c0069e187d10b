"""Global enums. Values are the persisted and wire representation."""

from enum import Enum


class Direction(str, Enum):
    UP = "UP"
    DOWN = "DOWN"

    @property
    def opposite(self) -> "Direction":
        return Direction.DOWN if self is Direction.UP else Direction.UP


class RoundStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class StorageBackend(str, Enum):
    MEMORY = "memory"
    FILE = "file"
    REDIS = "redis"

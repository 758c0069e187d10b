"""Key-value backend Protocol.

Backends move opaque strings; JSON encoding, key prefixing and failure policy
live in PersistenceLayer. Every backend converts its native I/O errors into
StorageUnavailableError so the layer has one thing to catch.
"""

from typing import Protocol


class KeyValueBackend(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def close(self) -> None: ...

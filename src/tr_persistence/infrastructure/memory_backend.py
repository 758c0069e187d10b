"""Process-local backend. Default for simulation runs and unit tests."""


class InMemoryBackend:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def close(self) -> None:
        pass

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)

"""In-memory key-value storage.

Session-only; nothing survives the process.
"""

from .base import KeyValueStorage


class InMemoryStorage(KeyValueStorage):
    """Dict-backed storage."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    async def connect(self) -> None:
        """No-op for in-memory storage."""

    async def disconnect(self) -> None:
        """No-op for in-memory storage."""

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    @property
    def backend_type(self) -> str:
        return "memory"

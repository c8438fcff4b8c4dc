"""Factory for creating key-value storage backends."""

from typing import Any

from .base import KeyValueStorage

DB_FILENAME = "streamchat.db"


def create_storage(
    backend: str = "sqlite",
    **kwargs: Any
) -> KeyValueStorage:
    """Create a key-value storage backend.

    Args:
        backend: Backend type ("sqlite" or "memory")
        **kwargs: Backend-specific configuration
            For sqlite:
                - path: str | Path (default: STREAMCHAT_DATA_DIR/streamchat.db)

    Returns:
        KeyValueStorage instance (not yet connected)

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "sqlite":
        from ..config import data_dir
        from .sqlite import SQLiteStorage
        return SQLiteStorage(kwargs.get("path") or data_dir() / DB_FILENAME)

    elif backend == "memory":
        from .in_memory import InMemoryStorage
        return InMemoryStorage(**kwargs)

    raise ValueError(
        f"Unsupported storage backend: {backend}. "
        f"Supported backends: sqlite, memory"
    )

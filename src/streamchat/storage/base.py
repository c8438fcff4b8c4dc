"""Abstract base class for durable key-value storage.

This module defines the interface for the client's local storage.
The abstraction hides:
- Storage location (SQLite database, memory)
- Connection management
- Write atomicity
"""

from abc import ABC, abstractmethod


class StorageError(Exception):
    """Raised by backends when a value cannot be read or written."""


class KeyValueStorage(ABC):
    """Abstract string key-value storage.

    Values are opaque text; encoding them (JSON or plain text) is up to
    the caller.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the storage backend.

        Raises:
            StorageError: If the backend cannot be opened
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the storage backend gracefully."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent.

        Raises:
            StorageError: If the value exists but cannot be read
        """

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one.

        Raises:
            StorageError: If the value cannot be written
        """

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

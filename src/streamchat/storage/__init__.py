"""Durable local storage for the chat client.

Persists preferences, message history and theme between runs.
"""

from .base import KeyValueStorage, StorageError
from .factory import create_storage
from .stores import ChatStore

__all__ = [
    "ChatStore",
    "KeyValueStorage",
    "StorageError",
    "create_storage",
]

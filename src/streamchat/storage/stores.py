"""Preference, history and theme persistence.

Loading is best-effort: missing, unreadable or corrupt values fall back to
defaults. Saving is best-effort too: storage errors are logged and never
reach the caller, so persistence can't block the chat flow.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError

from ..config import DEFAULT_THEME, HISTORY_KEY, PREF_KEY, THEME_KEY
from ..llm.models import Role
from ..models import Conversation, Message, Preferences, generate_id, now_ms
from .base import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

THEMES = ("dark", "light")
VALID_ROLES = frozenset(role.value for role in Role)


def _parse_message(raw: Any) -> Message | None:
    """Rebuild a stored message, or None if its role or content is unusable."""
    if (
        not isinstance(raw, dict)
        or not isinstance(raw.get("role"), str)
        or raw["role"] not in VALID_ROLES
        or not isinstance(raw.get("content"), str)
    ):
        return None
    message_id = raw.get("id")
    timestamp = raw.get("ts")
    return Message(
        id=message_id if isinstance(message_id, str) else generate_id(),
        role=Role(raw["role"]),
        content=raw["content"],
        timestamp=timestamp if isinstance(timestamp, int) and not isinstance(timestamp, bool) else now_ms(),
    )


class ChatStore:
    """Durable client state on top of a key-value backend.

    Usage:
        async with ChatStore(create_storage()) as store:
            preferences = await store.load_preferences()
    """

    def __init__(self, storage: KeyValueStorage):
        self._storage = storage

    @property
    def storage(self) -> KeyValueStorage:
        return self._storage

    async def connect(self) -> None:
        """Open the backend; a failure leaves the store running on defaults."""
        try:
            await self._storage.connect()
        except StorageError as e:
            logger.warning("Failed to open storage: %s", e)

    async def close(self) -> None:
        await self._storage.disconnect()

    async def __aenter__(self) -> "ChatStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _read(self, key: str, label: str) -> str | None:
        try:
            return await self._storage.get(key)
        except StorageError as e:
            logger.warning("Failed to load %s: %s", label, e)
            return None

    async def _read_json(self, key: str, label: str) -> Any:
        raw = await self._read(key, label)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning("Failed to load %s: %s", label, e)
            return None

    async def _write(self, key: str, value: str, label: str) -> None:
        try:
            await self._storage.set(key, value)
        except StorageError as e:
            logger.warning("Failed to save %s: %s", label, e)

    async def load_history(self) -> Conversation:
        """Load the stored conversation; empty when absent or corrupt."""
        data = await self._read_json(HISTORY_KEY, "chat history")
        if not isinstance(data, dict) or not isinstance(data.get("messages"), list):
            return Conversation()
        messages = [m for m in map(_parse_message, data["messages"]) if m is not None]
        return Conversation(messages=messages)

    async def save_history(self, conversation: Conversation) -> None:
        payload = {
            "messages": [m.model_dump(mode="json", by_alias=True) for m in conversation.messages]
        }
        await self._write(HISTORY_KEY, json.dumps(payload), "chat history")

    async def clear_history(self) -> None:
        try:
            await self._storage.remove(HISTORY_KEY)
        except StorageError as e:
            logger.warning("Failed to clear chat history: %s", e)

    async def load_preferences(self) -> Preferences:
        """Load stored preferences with field-level fallback to defaults."""
        data = await self._read_json(PREF_KEY, "preferences")
        try:
            return Preferences.from_stored(data)
        except ValidationError as e:
            logger.warning("Failed to load preferences: %s", e)
            return Preferences()

    async def save_preferences(self, preferences: Preferences) -> None:
        await self._write(PREF_KEY, json.dumps(preferences.to_stored()), "preferences")

    async def load_theme(self) -> str | None:
        """Stored theme ("dark" or "light"), or None when unset or invalid."""
        raw = await self._read(THEME_KEY, "theme")
        if raw is None:
            return None
        theme = raw.strip()
        return theme if theme in THEMES else None

    async def save_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme}. Supported themes: {', '.join(THEMES)}")
        await self._write(THEME_KEY, theme, "theme")

    async def resolve_theme(self) -> str:
        return await self.load_theme() or DEFAULT_THEME

"""Data models for the chat client.

These models define messages, conversations and preferences independent
of the storage backend used to persist them. Stored field names (``ts``,
``maxTokens``, ``systemPrompt``) are kept as aliases so existing history
and preference files stay readable.
"""

import math
import time
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import CHARS_PER_TOKEN, DEFAULT_MODEL, DEFAULT_TEMPERATURE
from .llm.models import Role


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def generate_id() -> str:
    return str(uuid4())


def approx_token_count(text: str) -> int:
    """Rough token estimate shown next to the input box."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


class Message(BaseModel):
    """A message in the conversation.

    Messages are immutable; the assistant reply being streamed lives in the
    stream session until it is complete.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=generate_id, description="Opaque unique identifier")
    role: Role = Field(description="Role of the message sender")
    content: str = Field(description="Message text")
    timestamp: int = Field(default_factory=now_ms, alias="ts", description="Epoch milliseconds")

    def to_wire(self) -> dict[str, str]:
        """Role and content only, as sent to the proxy."""
        return {"role": self.role.value, "content": self.content}


class Conversation(BaseModel):
    """Ordered messages, oldest first, including the system message if any.

    Operations return a new Conversation and leave this one untouched.
    """

    messages: list[Message] = Field(default_factory=list)

    @property
    def system_message(self) -> Message | None:
        for message in self.messages:
            if message.role == Role.SYSTEM:
                return message
        return None

    def display_messages(self) -> list[Message]:
        """Messages shown to the user (system message excluded)."""
        return [m for m in self.messages if m.role != Role.SYSTEM]

    def with_message(self, message: Message) -> "Conversation":
        return Conversation(messages=[*self.messages, message])

    def reconcile_system_prompt(self, prompt: str, now: int | None = None) -> "Conversation":
        """Make the system message mirror ``prompt``.

        Non-empty prompt: exactly one system message, at index 0, with that
        content (timestamp refreshed only when the content changes). Empty
        prompt: no system message at all.

        Args:
            prompt: Current system-prompt preference
            now: Timestamp for a new or updated system message

        Returns:
            Reconciled conversation (self when nothing changes)
        """
        others = [m for m in self.messages if m.role != Role.SYSTEM]

        if not prompt:
            if len(others) == len(self.messages):
                return self
            return Conversation(messages=others)

        existing = self.system_message
        system_count = len(self.messages) - len(others)
        if (
            existing is not None
            and existing.content == prompt
            and system_count == 1
            and self.messages[0] is existing
        ):
            return self

        timestamp = now if now is not None else now_ms()
        if existing is None:
            system = Message(role=Role.SYSTEM, content=prompt, timestamp=timestamp)
        elif existing.content != prompt:
            system = existing.model_copy(update={"content": prompt, "timestamp": timestamp})
        else:
            system = existing
        return Conversation(messages=[system, *others])

    def to_wire(self) -> list[dict[str, str]]:
        return [message.to_wire() for message in self.messages]


class Preferences(BaseModel):
    """User-adjustable request settings."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    model: str = Field(default=DEFAULT_MODEL, description="Upstream model identifier")
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=1.0)
    max_tokens: int | None = Field(default=None, ge=1, alias="maxTokens")
    system_prompt: str = Field(default="", alias="systemPrompt")

    @classmethod
    def from_stored(cls, data: Any) -> "Preferences":
        """Build preferences from stored data, field by field.

        A stored field with the wrong type (or out of range) is replaced
        by its default; the remaining fields are still used. A numeric
        ``maxTokens`` is rounded to a positive integer first, as the
        input controls do.
        """
        if not isinstance(data, dict):
            return cls()

        values: dict[str, Any] = {}
        for name, field in cls.model_fields.items():
            key = field.alias or name
            if key not in data:
                continue
            value = data[key]
            if name == "max_tokens" and isinstance(value, (int, float)) and not isinstance(value, bool):
                value = normalize_max_tokens(value)
            try:
                cls.model_validate({key: value}, strict=True)
            except ValidationError:
                continue
            values[key] = value
        return cls.model_validate(values)

    def to_stored(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def normalize_max_tokens(value: str | float | None) -> int | None:
    """Turn a max-tokens input into a positive integer, or None for unset."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = float(value)
        except ValueError:
            return None
    if not math.isfinite(value):
        return None
    return max(1, round(value))


def clamp_temperature(value: float) -> float:
    return min(1.0, max(0.0, value))

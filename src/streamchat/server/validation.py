"""Inbound chat payload validation and input-size guard.

Everything here runs before any upstream call. Failures come back as
``ChatError`` values, never as exceptions.
"""

import math
from typing import Any

from ..config import MAX_INPUT_CHARS
from ..errors import ChatError
from ..llm.models import ChatMessage, ChatRequest, Role

VALID_ROLES = frozenset(role.value for role in Role)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but not a number in JSON terms
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def truncate_content(content: str, limit: int = MAX_INPUT_CHARS) -> str:
    """Cut message content down to at most ``limit`` characters."""
    return content[:limit]


def total_input_length(messages: list[ChatMessage]) -> int:
    """Sum of message content lengths, in characters."""
    return sum(len(message.content) for message in messages)


def validate_chat_payload(body: Any, limit: int = MAX_INPUT_CHARS) -> ChatRequest | ChatError:
    """Validate a decoded JSON request body.

    Each message's content is truncated to ``limit`` characters; the total
    of the truncated lengths must not exceed ``limit``.

    Args:
        body: Decoded JSON body
        limit: Character cap per message and in total

    Returns:
        ChatRequest ready for the upstream call, or the ChatError
        (InvalidPayload, InvalidMessage or PayloadTooLarge) to answer with
    """
    if not isinstance(body, dict):
        return ChatError.invalid_payload()

    messages = body.get("messages")
    model = body.get("model")
    if not isinstance(messages, list) or not isinstance(model, str):
        return ChatError.invalid_payload()

    temperature = body.get("temperature")
    max_tokens = body.get("max_tokens")

    sanitized: list[ChatMessage] = []
    for message in messages:
        if (
            not isinstance(message, dict)
            or not isinstance(message.get("role"), str)
            or message["role"] not in VALID_ROLES
            or not isinstance(message.get("content"), str)
        ):
            return ChatError.invalid_message()
        sanitized.append(ChatMessage(
            role=Role(message["role"]),
            content=truncate_content(message["content"], limit),
        ))

    if total_input_length(sanitized) > limit:
        return ChatError.payload_too_large()

    return ChatRequest(
        messages=sanitized,
        model=model,
        temperature=float(temperature) if _is_number(temperature) else None,
        max_tokens=int(max_tokens) if _is_number(max_tokens) else None,
    )

"""Chat send lifecycle on the client side.

Hides the request/stream sequencing from the UI:
- System-prompt reconciliation before every send
- Request composition and the HTTP call to the proxy
- Incremental decoding and partial-text publishing
- Finalization, cancellation and failure handling
- Persisting every conversation change right after it happens
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import httpx

from ..config import CHAT_ENDPOINT, MSG_REQUEST_FAILED, MSG_SOMETHING_WRONG, MSG_STREAM_STOPPED
from ..errors import ChatError, ErrorKind, error_from_status
from ..llm.models import Role
from ..models import Conversation, Message, Preferences, now_ms
from ..storage import ChatStore
from .decoder import StreamDecoder

logger = logging.getLogger(__name__)

PartialCallback = Callable[[str], None]


class SendStatus(str, Enum):
    """How a send ended."""

    COMPLETED = "completed"
    STOPPED = "stopped"
    FAILED = "failed"
    REJECTED = "rejected"


@dataclass
class SendOutcome:
    """Result of one ``ChatOrchestrator.send()`` call."""

    status: SendStatus
    conversation: Conversation
    reply: Message | None = None
    error: ChatError | None = None


@dataclass
class StreamSession:
    """State of the one in-flight send. Never persisted."""

    task: "asyncio.Task[str | ChatError] | None" = None
    aborted: bool = False
    cleared: bool = False
    text: str = ""


def build_request_body(conversation: Conversation, preferences: Preferences) -> dict[str, Any]:
    """JSON body for POST /api/chat; max_tokens is omitted when unset."""
    body: dict[str, Any] = {
        "messages": conversation.to_wire(),
        "model": preferences.model,
        "temperature": preferences.temperature,
    }
    if preferences.max_tokens is not None:
        body["max_tokens"] = preferences.max_tokens
    return body


def build_export(
    conversation: Conversation,
    preferences: Preferences,
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    """Exportable snapshot of preferences and the full message list."""
    generated_at = generated_at or datetime.now(timezone.utc)
    return {
        "generatedAt": generated_at.isoformat(),
        "preferences": preferences.to_stored(),
        "messages": [m.model_dump(mode="json", by_alias=True) for m in conversation.messages],
    }


class ChatOrchestrator:
    """Owns the conversation and runs at most one send at a time.

    Usage:
        async with httpx.AsyncClient(base_url=server_url) as client:
            chat = ChatOrchestrator(client, store, conversation=await store.load_history())
            outcome = await chat.send("Hello", preferences, on_partial=print)
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        store: ChatStore,
        endpoint: str = CHAT_ENDPOINT,
        conversation: Conversation | None = None,
        decode_errors: str = "replace",
    ) -> None:
        """Initialize the orchestrator.

        Args:
            client: HTTP client pointed at the proxy
            store: Persistence for the conversation
            endpoint: Chat endpoint path or URL
            conversation: Starting conversation, usually ``await store.load_history()``
            decode_errors: Codec error handler for the response body
        """
        self._client = client
        self._store = store
        self._endpoint = endpoint
        self._decode_errors = decode_errors
        self._conversation = conversation if conversation is not None else Conversation()
        self._session: StreamSession | None = None
        self._listeners: list[Callable[[Conversation], None]] = []
        self.error: str | None = None

    @property
    def conversation(self) -> Conversation:
        return self._conversation

    @property
    def is_streaming(self) -> bool:
        return self._session is not None

    @property
    def pending_text(self) -> str | None:
        """Partial assistant reply of the in-flight send, if any."""
        return self._session.text if self._session is not None else None

    def subscribe(self, listener: Callable[[Conversation], None]) -> None:
        """Register a callback run after every committed conversation change."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self._conversation)

    async def _commit(self, conversation: Conversation) -> None:
        self._conversation = conversation
        self._notify()
        await self._store.save_history(conversation)

    def _outcome(self, status: SendStatus, **kwargs: Any) -> SendOutcome:
        return SendOutcome(status=status, conversation=self._conversation, **kwargs)

    def _stopped(self, session: StreamSession) -> SendOutcome:
        if not session.cleared:
            self.error = MSG_STREAM_STOPPED
        logger.info("Streaming stopped by user")
        return self._outcome(
            SendStatus.STOPPED,
            error=ChatError(kind=ErrorKind.STREAM_ABORTED, message=MSG_STREAM_STOPPED),
        )

    async def send(
        self,
        user_text: str,
        preferences: Preferences,
        on_partial: PartialCallback | None = None,
    ) -> SendOutcome:
        """Send a user message and stream the assistant's reply.

        Rejected without side effects when the text is blank or another
        send is in flight. The partial reply is published through
        ``on_partial`` as cumulative text and only becomes part of the
        conversation when the stream completes.

        Args:
            user_text: Raw input text (trimmed before sending)
            preferences: Model settings and system prompt for this send
            on_partial: Called with the cumulative reply after every chunk

        Returns:
            SendOutcome describing how the send ended
        """
        trimmed = user_text.strip()
        if not trimmed or self._session is not None:
            return self._outcome(SendStatus.REJECTED)

        # Claimed before the first await so a concurrent send is rejected.
        session = StreamSession()
        self._session = session
        try:
            self.error = None
            now = now_ms()
            conversation = self._conversation.reconcile_system_prompt(preferences.system_prompt, now)
            conversation = conversation.with_message(Message(role=Role.USER, content=trimmed, timestamp=now))
            await self._commit(conversation)
            if session.aborted:
                return self._stopped(session)

            session.task = asyncio.create_task(
                self._stream(build_request_body(conversation, preferences), session, on_partial)
            )
            try:
                result = await session.task
            except asyncio.CancelledError:
                if not session.aborted:
                    raise
                return self._stopped(session)
            if session.aborted:
                return self._stopped(session)

            if isinstance(result, ChatError):
                logger.error("Chat request failed: %s", result.message)
                self.error = result.message
                return self._outcome(SendStatus.FAILED, error=result)

            reply = Message(role=Role.ASSISTANT, content=result, timestamp=now_ms())
            await self._commit(self._conversation.with_message(reply))
            return self._outcome(SendStatus.COMPLETED, reply=reply)
        finally:
            self._session = None

    async def _stream(
        self,
        body: dict[str, Any],
        session: StreamSession,
        on_partial: PartialCallback | None,
    ) -> str | ChatError:
        """POST the request and decode the streamed reply."""
        decoder = StreamDecoder(errors=self._decode_errors)
        try:
            async with self._client.stream("POST", self._endpoint, json=body) as response:
                if not response.is_success:
                    await response.aread()
                    return error_from_status(
                        response.status_code,
                        response.text.strip() or MSG_REQUEST_FAILED,
                    )
                async for snapshot in decoder.asnapshots(response.aiter_bytes()):
                    session.text = snapshot
                    if on_partial is not None:
                        on_partial(snapshot)
        except httpx.HTTPError as e:
            return ChatError(kind=ErrorKind.NETWORK_FAILURE, message=str(e) or MSG_SOMETHING_WRONG)
        except UnicodeDecodeError as e:
            return ChatError(kind=ErrorKind.DECODE_FAILURE, message=str(e) or MSG_SOMETHING_WRONG)
        return decoder.text

    def cancel(self) -> bool:
        """Stop the in-flight send, if any.

        Cancelling the stream task closes the HTTP response, which makes the
        proxy abort its upstream stream.

        Returns:
            True if a send was cancelled
        """
        session = self._session
        if session is None or session.aborted:
            return False
        session.aborted = True
        if session.task is not None and not session.task.done():
            session.task.cancel()
        return True

    async def clear(self) -> None:
        """Forget the conversation, including its stored copy.

        An in-flight send is stopped without leaving a "stopped" error.
        """
        if self._session is not None:
            self._session.cleared = True
        self.cancel()
        self._conversation = Conversation()
        self.error = None
        self._notify()
        await self._store.clear_history()

    def clear_error(self) -> None:
        self.error = None

    def export(self, preferences: Preferences) -> dict[str, Any]:
        return build_export(self._conversation, preferences)

"""FastAPI application exposing the streaming chat proxy."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, StreamingResponse

from ..config import CHAT_ENDPOINT, env_flag
from ..errors import ChatError
from ..llm import UpstreamProvider, create_upstream_provider
from .relay import ChatRelay
from .validation import validate_chat_payload

logger = logging.getLogger(__name__)

TEXT_MEDIA_TYPE = "text/plain; charset=utf-8"


def provider_from_env() -> UpstreamProvider:
    """Create the upstream provider from environment variables.

    Environment variables:
        OPENAI_API_KEY: OpenAI API key (required)
        OPENAI_BASE_URL: Custom API base URL
        STREAMCHAT_USE_RESPONSES_API: Allow the Responses API (default: true)

    Raises:
        RuntimeError: If OPENAI_API_KEY is not set
    """
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY not set in environment")
    return create_upstream_provider(
        "openai",
        api_key=api_key,
        base_url=os.getenv("OPENAI_BASE_URL") or None,
        use_responses_api=env_flag("STREAMCHAT_USE_RESPONSES_API", True),
    )


def error_response(error: ChatError) -> PlainTextResponse:
    """Render a ChatError as a plain-text HTTP response."""
    return PlainTextResponse(error.message, status_code=error.status or 500)


def create_app(provider: UpstreamProvider | None = None) -> FastAPI:
    """Build the proxy application.

    Args:
        provider: Upstream provider; created from the environment at
            startup when omitted. Closed at shutdown either way.

    Returns:
        FastAPI application serving POST /api/chat
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.provider is None
        if owned:
            app.state.provider = provider_from_env()
        try:
            yield
        finally:
            await app.state.provider.close()
            if owned:
                app.state.provider = None

    app = FastAPI(
        title="streamchat",
        description="Stateless streaming proxy in front of a hosted language-model API.",
        lifespan=lifespan,
    )
    app.state.provider = provider

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    @app.post(CHAT_ENDPOINT)
    async def chat(request: Request):
        """Validate the request and relay the upstream token stream as plain text."""
        try:
            body = await request.json()
        except ValueError:
            return error_response(ChatError.invalid_payload())

        validated = validate_chat_payload(body)
        if isinstance(validated, ChatError):
            return error_response(validated)

        opened = await ChatRelay(request.app.state.provider).open(validated)
        if isinstance(opened, ChatError):
            return error_response(opened)

        logger.info(
            "Streaming reply to %d messages with model %s via %s",
            len(validated.messages),
            validated.model,
            opened.path.value,
        )
        return StreamingResponse(opened.iter_bytes(), media_type=TEXT_MEDIA_TYPE)

    return app

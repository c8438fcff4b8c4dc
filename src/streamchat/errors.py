"""Error taxonomy shared by the proxy and the client.

Errors cross component boundaries as ``ChatError`` values instead of
exceptions. Third-party exceptions are converted at the seam where they
are caught.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from . import config


class ErrorKind(str, Enum):
    """Kinds of failure a chat exchange can end with."""

    # Client input, always 4xx
    INVALID_PAYLOAD = "invalid_payload"
    INVALID_MESSAGE = "invalid_message"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    # Server to upstream
    INVALID_CREDENTIALS = "invalid_credentials"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_ERROR = "upstream_error"
    SERVER_ERROR = "server_error"
    # Client side
    STREAM_ABORTED = "stream_aborted"
    DECODE_FAILURE = "decode_failure"
    NETWORK_FAILURE = "network_failure"


class ChatError(BaseModel):
    """A classified failure with the HTTP status and human-readable message."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind = Field(description="Classified error kind")
    status: int | None = Field(default=None, description="HTTP status code, None for client-side failures")
    message: str = Field(description="Human-readable message shown to the user")

    @classmethod
    def invalid_payload(cls) -> "ChatError":
        return cls(kind=ErrorKind.INVALID_PAYLOAD, status=400, message=config.MSG_INVALID_PAYLOAD)

    @classmethod
    def invalid_message(cls) -> "ChatError":
        return cls(kind=ErrorKind.INVALID_MESSAGE, status=400, message=config.MSG_INVALID_MESSAGE)

    @classmethod
    def payload_too_large(cls) -> "ChatError":
        return cls(kind=ErrorKind.PAYLOAD_TOO_LARGE, status=413, message=config.MSG_PAYLOAD_TOO_LARGE)

    @classmethod
    def server_error(cls) -> "ChatError":
        return cls(kind=ErrorKind.SERVER_ERROR, status=500, message=config.MSG_SERVER_ERROR)


class UpstreamError(Exception):
    """Raised by upstream providers for failures reported by the remote API.

    Providers translate their SDK's exceptions into this type so the proxy
    only has to know about status codes.

    Attributes:
        status_code: HTTP status reported upstream, None for transport failures
        message: Upstream error message
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UpstreamStreamError(UpstreamError):
    """Explicit error event received in the middle of an upstream stream."""


def map_exception(exc: BaseException) -> ChatError:
    """Classify an exception raised while talking to the upstream API.

    Args:
        exc: Exception caught by the proxy

    Returns:
        ChatError with the status and message the endpoint should answer with
    """
    if isinstance(exc, UpstreamError):
        if exc.status_code == 401:
            return ChatError(
                kind=ErrorKind.INVALID_CREDENTIALS,
                status=401,
                message=config.MSG_INVALID_CREDENTIALS,
            )
        if exc.status_code == 429:
            return ChatError(
                kind=ErrorKind.RATE_LIMITED,
                status=429,
                message=config.MSG_RATE_LIMITED,
            )
        return ChatError(
            kind=ErrorKind.UPSTREAM_ERROR,
            status=exc.status_code or 500,
            message=exc.message or config.MSG_UPSTREAM_ERROR,
        )
    return ChatError.server_error()


def error_from_status(status: int, message: str) -> ChatError:
    """Classify an error response received from the proxy.

    Args:
        status: HTTP status of the proxy response
        message: Response body text, shown to the user as is
    """
    kinds = {
        400: ErrorKind.INVALID_PAYLOAD,
        401: ErrorKind.INVALID_CREDENTIALS,
        413: ErrorKind.PAYLOAD_TOO_LARGE,
        429: ErrorKind.RATE_LIMITED,
        500: ErrorKind.SERVER_ERROR,
    }
    return ChatError(kind=kinds.get(status, ErrorKind.UPSTREAM_ERROR), status=status, message=message)

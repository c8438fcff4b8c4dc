"""Streaming chat proxy.

- validation.py: payload checks and the input-size guard
- relay.py: upstream stream selection, fallback and forwarding
- app.py: FastAPI application and HTTP error rendering
"""

from .app import create_app, error_response, provider_from_env
from .relay import ChatRelay, RelayStream, UpstreamPath
from .validation import total_input_length, truncate_content, validate_chat_payload

__all__ = [
    "ChatRelay",
    "RelayStream",
    "UpstreamPath",
    "create_app",
    "error_response",
    "provider_from_env",
    "total_input_length",
    "truncate_content",
    "validate_chat_payload",
]

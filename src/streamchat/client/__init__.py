"""Chat client.

- decoder.py: incremental UTF-8 decoding of the response body
- orchestrator.py: send lifecycle, cancellation and persistence
"""

from .decoder import StreamDecoder
from .orchestrator import (
    ChatOrchestrator,
    SendOutcome,
    SendStatus,
    StreamSession,
    build_export,
    build_request_body,
)

__all__ = [
    "ChatOrchestrator",
    "SendOutcome",
    "SendStatus",
    "StreamDecoder",
    "StreamSession",
    "build_export",
    "build_request_body",
]

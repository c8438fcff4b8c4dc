from .base import ResponsesCapability, UpstreamProvider
from .factory import create_upstream_provider
from .models import ChatMessage, ChatRequest, DeltaStream, Role
from .providers import OpenAIProvider

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "DeltaStream",
    "OpenAIProvider",
    "ResponsesCapability",
    "Role",
    "UpstreamProvider",
    "create_upstream_provider",
]

"""
streamchat: a streaming chat proxy for hosted language models, with a
terminal client.

The server relays an upstream token stream as plain text; the client
keeps the conversation, preferences and theme in durable local storage.
"""

__version__ = "0.1.0"

from .errors import ChatError, ErrorKind
from .models import Conversation, Message, Preferences
from .server import create_app

__all__ = [
    "ChatError",
    "Conversation",
    "ErrorKind",
    "Message",
    "Preferences",
    "create_app",
]

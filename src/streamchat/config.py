"""Configuration constants.

Centralizes limits, storage keys, defaults and user-facing messages
shared by the server and the client.
"""

import os
from pathlib import Path

# Input-size guard applied by the proxy, per message and in total
MAX_INPUT_CHARS = 20000

# Durable storage keys (the "-v1" suffix is the only schema version)
HISTORY_KEY = "ai-chat-history-v1"
PREF_KEY = "ai-chat-prefs-v1"
THEME_KEY = "ai-chat-theme"

# Models offered by the UI model picker
MODEL_OPTIONS = ("gpt-5", "gpt-4.1", "gpt-4o-mini")

DEFAULT_MODEL = "gpt-5"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_THEME = "dark"

# Rough chars-per-token ratio for the input counter
CHARS_PER_TOKEN = 4

# Endpoint messages
MSG_INVALID_PAYLOAD = "Invalid request payload."
MSG_INVALID_MESSAGE = "Invalid message format."
MSG_PAYLOAD_TOO_LARGE = "Input too long. Please shorten your message."
MSG_INVALID_CREDENTIALS = "Invalid OpenAI API key."
MSG_RATE_LIMITED = "Rate limit exceeded. Please wait and try again."
MSG_UPSTREAM_ERROR = "OpenAI API error."
MSG_SERVER_ERROR = "Server error."

# Client messages
MSG_REQUEST_FAILED = "Request failed."
MSG_STREAM_STOPPED = "Streaming stopped."
MSG_SOMETHING_WRONG = "Something went wrong."

CHAT_ENDPOINT = "/api/chat"


def data_dir() -> Path:
    """Directory holding the durable client storage.

    Override with the STREAMCHAT_DATA_DIR environment variable.
    """
    return Path(os.getenv("STREAMCHAT_DATA_DIR", str(Path.home() / ".streamchat")))


def server_url() -> str:
    """Base URL of the proxy the client talks to."""
    return os.getenv("STREAMCHAT_SERVER_URL", "http://127.0.0.1:8000")


def env_flag(name: str, default: bool) -> bool:
    """Read a boolean environment variable ("1", "true", "yes", "on")."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")

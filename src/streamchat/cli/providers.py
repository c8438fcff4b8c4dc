"""Provider factory functions for CLI.

Centralizes creation of the store, the upstream provider and logging from
environment variables. Hides configuration details from command
implementations.
"""

import logging
import os

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..config import server_url
from ..llm import UpstreamProvider
from ..server import provider_from_env
from ..storage import ChatStore, create_storage

# Default console for output
_console = Console()


def configure_logging(level: str | None = None) -> None:
    """Route log records through rich on stderr.

    Args:
        level: Log level name; defaults to STREAMCHAT_LOG_LEVEL or WARNING
    """
    level_name = (level or os.getenv("STREAMCHAT_LOG_LEVEL", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def get_store() -> ChatStore:
    """Create the client store from environment variables.

    Environment variables:
        STREAMCHAT_STORAGE: Backend type (sqlite or memory; default: sqlite)
        STREAMCHAT_DATA_DIR: Directory holding streamchat.db (default: ~/.streamchat)
    """
    return ChatStore(create_storage(os.getenv("STREAMCHAT_STORAGE", "sqlite")))


def get_upstream(console: Console | None = None) -> UpstreamProvider:
    """Create the upstream provider from environment variables.

    Raises:
        SystemExit: If OPENAI_API_KEY is not set

    Environment variables:
        OPENAI_API_KEY: OpenAI API key (required)
        OPENAI_BASE_URL: Custom API base URL
        STREAMCHAT_USE_RESPONSES_API: Allow the Responses API (default: true)
    """
    con = console or _console
    if not os.getenv("OPENAI_API_KEY"):
        con.print("[red]Error: OPENAI_API_KEY not set in environment[/red]")
        raise typer.Exit(code=1)
    return provider_from_env()


def get_server_url(override: str | None = None) -> str:
    """Proxy base URL: explicit option, else STREAMCHAT_SERVER_URL."""
    return override or server_url()


def get_timeout() -> float | None:
    """HTTP timeout for the client from STREAMCHAT_TIMEOUT; None means no timeout."""
    raw = os.getenv("STREAMCHAT_TIMEOUT")
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        _console.print(f"[yellow]Warning: ignoring invalid STREAMCHAT_TIMEOUT={raw!r}[/yellow]")
        return None

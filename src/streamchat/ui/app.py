"""Main Textual TUI application.

Orchestrates the UI components and hands user actions to ChatOrchestrator.
Application state (conversation, preferences, theme) is owned here and
persisted through ChatStore whenever it changes.
"""

import asyncio
import json
from pathlib import Path

import httpx
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header

from ..client import ChatOrchestrator, SendStatus
from ..models import Conversation, Preferences, now_ms
from ..storage import ChatStore
from .styles import APP_CSS
from .themes import THEMES, other_theme
from .widgets import ChatInputBar, ChatLog, ErrorBanner, InputStats, ModelControls


class ChatTextualApp(App):
    """Textual TUI for streaming chat."""

    CSS = APP_CSS
    TITLE = "AI Chat Playground"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("escape", "stop_streaming", "Stop"),
        Binding("ctrl+k", "clear_chat", "Clear Chat"),
        Binding("ctrl+e", "export_chat", "Export JSON"),
        Binding("ctrl+t", "toggle_theme", "Theme"),
    ]

    def __init__(
        self,
        client: httpx.AsyncClient,
        store: ChatStore,
        preferences: Preferences,
        theme: str,
        conversation: Conversation,
        export_dir: Path | None = None,
    ) -> None:
        super().__init__()
        self._store = store
        self._export_dir = export_dir or Path.cwd()
        self._preferences = preferences
        self._theme_choice = theme
        self._orchestrator = ChatOrchestrator(client, store, conversation=conversation)
        self._input_text = ""

    @property
    def orchestrator(self) -> ChatOrchestrator:
        return self._orchestrator

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="main-panel"):
            yield ChatLog(id="chat-log")
            yield InputStats(id="input-stats")
            yield ChatInputBar(id="chat-input-bar")
            yield ErrorBanner(id="error-banner")
        yield ModelControls(self._preferences, id="model-controls")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        for theme in THEMES.values():
            self.register_theme(theme)
        self.theme = THEMES[self._theme_choice].name

        self._orchestrator.subscribe(self._on_conversation_changed)
        self._on_conversation_changed(self._orchestrator.conversation)
        self._refresh_status()
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def _on_conversation_changed(self, conversation: Conversation) -> None:
        self.query_one("#chat-log", ChatLog).sync(conversation.display_messages())
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        count = len(self._orchestrator.conversation.display_messages())
        self.sub_title = f"{self._preferences.model} | {count} messages"

    def _refresh_status(self) -> None:
        self.query_one("#input-stats", InputStats).show(
            self._input_text, streaming=self._orchestrator.is_streaming
        )
        self.query_one("#error-banner", ErrorBanner).show_error(self._orchestrator.error)

    def on_chat_input_bar_edited(self, event: ChatInputBar.Edited) -> None:
        self._input_text = event.value
        self._refresh_status()

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        if self._orchestrator.is_streaming:
            self.notify("A reply is still streaming", severity="warning", timeout=2)
            return
        self.query_one("#chat-input-bar", ChatInputBar).clear_input()
        self._send(event.value)

    async def on_model_controls_changed(self, event: ModelControls.Changed) -> None:
        self._preferences = event.preferences
        self._update_subtitle()
        await self._store.save_preferences(self._preferences)

    @work(exclusive=True)
    async def _send(self, text: str) -> None:
        """Run one send as a background async worker."""
        chat_log = self.query_one("#chat-log", ChatLog)
        self._orchestrator.clear_error()
        self._refresh_status()

        try:
            outcome = await self._orchestrator.send(
                text, self._preferences, on_partial=chat_log.show_pending
            )
        except asyncio.CancelledError:
            chat_log.drop_pending()
            self._refresh_status()
            raise

        chat_log.drop_pending()
        self._refresh_status()

        if outcome.status is SendStatus.STOPPED:
            self.notify("Streaming stopped", severity="warning", timeout=2)
        elif outcome.status is SendStatus.FAILED and outcome.error is not None:
            self.notify(f"Error: {outcome.error.message[:50]}", severity="error", timeout=5)

    def action_stop_streaming(self) -> None:
        """Stop the in-flight reply."""
        self._orchestrator.cancel()

    async def action_clear_chat(self) -> None:
        """Clear the conversation and its stored copy."""
        self.query_one("#chat-log", ChatLog).clear_history()
        await self._orchestrator.clear()
        self._refresh_status()
        self.notify("Chat cleared", timeout=2)

    def action_export_chat(self) -> None:
        """Write preferences and messages to a JSON file."""
        payload = self._orchestrator.export(self._preferences)
        path = self._export_dir / f"chat-{now_ms()}.json"
        try:
            path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            self.notify(f"Export failed: {e}", severity="error", timeout=5)
            return
        self.notify(f"Exported to {path}", timeout=3)

    async def action_toggle_theme(self) -> None:
        """Switch between dark and light mode."""
        self._theme_choice = other_theme(self._theme_choice)
        self.theme = THEMES[self._theme_choice].name
        await self._store.save_theme(self._theme_choice)


async def run_textual_tui(
    store: ChatStore,
    server_url: str,
    timeout: float | None = None,
    export_dir: Path | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        store: Durable client storage, opened and closed here
        server_url: Base URL of the streamchat proxy
        timeout: HTTP timeout in seconds, None for no timeout
        export_dir: Directory for exported chats (default: cwd)
    """
    async with store, httpx.AsyncClient(base_url=server_url, timeout=timeout) as client:
        app = ChatTextualApp(
            client=client,
            store=store,
            preferences=await store.load_preferences(),
            theme=await store.resolve_theme(),
            conversation=await store.load_history(),
            export_dir=export_dir,
        )
        try:
            await app.run_async()
        except (KeyboardInterrupt, asyncio.CancelledError):
            pass
        finally:
            app.orchestrator.cancel()

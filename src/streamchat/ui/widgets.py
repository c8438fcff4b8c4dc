"""Custom Textual widgets for the chat TUI.

Hides widget implementation details:
- Chat message rendering and the streaming bubble
- Input submission and the character/token counter
- Model control parsing
"""

from datetime import datetime

from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.message import Message as TextualMessage
from textual.widgets import Button, Input, Label, Markdown, Select, Static, TextArea

from ..config import MODEL_OPTIONS
from ..llm.models import Role
from ..models import (
    Message,
    Preferences,
    approx_token_count,
    clamp_temperature,
    normalize_max_tokens,
)


def _format_ts(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%H:%M:%S")


class MessageBubble(Vertical):
    """One user or assistant message."""

    def __init__(self, message: Message, *args, **kwargs) -> None:
        role_class = "user-message" if message.role == Role.USER else "assistant-message"
        super().__init__(*args, classes=f"chat-message {role_class}", **kwargs)
        self.message = message

    def compose(self):
        prefix = "> You" if self.message.role == Role.USER else "< Assistant"
        yield Static(f"{prefix} [{_format_ts(self.message.timestamp)}]", classes="message-header")
        if self.message.role == Role.ASSISTANT:
            yield Markdown(self.message.content, classes="message-content")
        else:
            yield Static(Text(self.message.content), classes="message-content")


class StreamingBubble(Vertical):
    """Assistant reply that is still streaming; plain text until complete."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, classes="chat-message assistant-message streaming", **kwargs)

    def compose(self):
        yield Static("< Assistant [streaming...]", classes="message-header")
        yield Static("", classes="message-content", id="streaming-content")

    def update_text(self, text: str) -> None:
        self.query_one("#streaming-content", Static).update(Text(text))


class ChatLog(VerticalScroll):
    """Scrollable list of the visible conversation."""

    BORDER_TITLE = "Chat"
    ALLOW_SELECT = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._rendered_ids: list[str] = []
        self._pending: StreamingBubble | None = None

    def sync(self, messages: list[Message]) -> None:
        """Show exactly ``messages``; appends when only new ones were added."""
        ids = [m.id for m in messages]
        if ids[: len(self._rendered_ids)] != self._rendered_ids:
            self.clear_history()
        for message in messages[len(self._rendered_ids):]:
            bubble = MessageBubble(message)
            if self._pending is not None:
                self.mount(bubble, before=self._pending)
            else:
                self.mount(bubble)
            self._rendered_ids.append(message.id)
        self.border_subtitle = f"{len(self._rendered_ids)} messages"
        self.scroll_end(animate=False)

    def show_pending(self, text: str) -> None:
        """Create or update the streaming bubble."""
        if self._pending is None:
            self._pending = StreamingBubble()
            self.mount(self._pending)
            self.call_after_refresh(self._update_pending, text)
        else:
            self._update_pending(text)
        self.scroll_end(animate=False)

    def _update_pending(self, text: str) -> None:
        if self._pending is not None:
            self._pending.update_text(text)

    def drop_pending(self) -> None:
        if self._pending is not None:
            self._pending.remove()
            self._pending = None

    def clear_history(self) -> None:
        self._rendered_ids.clear()
        self._pending = None
        self.remove_children()
        self.border_subtitle = "0 messages"


class InputStats(Static):
    """Character count, approximate tokens and streaming indicator."""

    def show(self, text: str, streaming: bool = False) -> None:
        parts = [
            f"Characters: {len(text)}",
            f"Approx. tokens: {approx_token_count(text)}",
        ]
        if streaming:
            parts.append("[bold]Streaming...[/bold]")
        self.update("  |  ".join(parts))


class ErrorBanner(Static):
    """Shows one error string at a time."""

    def show_error(self, message: str | None) -> None:
        self.update(Text(message or ""))
        self.display = bool(message)


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(TextualMessage):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    class Edited(TextualMessage):
        """Message sent when the input text changes."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Send message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.highlight_cursor_line = False
        text_area.focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        self.post_message(self.Edited(event.text_area.text))

    def on_key(self, event) -> None:
        """Ctrl+J submits; terminals don't pass modifiers with Enter."""
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()

    def _submit(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if value:
            self.post_message(self.Submitted(text_area.text))

    def clear_input(self) -> None:
        self.query_one("#chat-input", TextArea).text = ""

    def focus_input(self) -> None:
        self.query_one("#chat-input", TextArea).focus()


class ModelControls(Vertical):
    """Model, temperature, max tokens and system prompt controls."""

    BORDER_TITLE = "Model"

    class Changed(TextualMessage):
        """Message sent when any control changes the preferences."""

        def __init__(self, preferences: Preferences) -> None:
            super().__init__()
            self.preferences = preferences

    def __init__(self, preferences: Preferences, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._preferences = preferences

    def compose(self):
        models = list(MODEL_OPTIONS)
        if self._preferences.model not in models:
            models.append(self._preferences.model)
        yield Label("Model")
        yield Select(
            [(name, name) for name in models],
            value=self._preferences.model,
            allow_blank=False,
            id="model-select",
        )
        yield Label("Temperature (0-1)")
        yield Input(value=f"{self._preferences.temperature:.2f}", id="temperature-input")
        yield Label("Max tokens (optional)")
        yield Input(
            value="" if self._preferences.max_tokens is None else str(self._preferences.max_tokens),
            placeholder="e.g. 1024",
            id="max-tokens-input",
        )
        yield Label("System prompt (optional)")
        yield TextArea(self._preferences.system_prompt, id="system-prompt-input")

    def _publish(self, **changes) -> None:
        updated = self._preferences.model_copy(update=changes)
        if updated != self._preferences:
            self._preferences = updated
            self.post_message(self.Changed(updated))

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id == "model-select" and isinstance(event.value, str):
            self._publish(model=event.value)

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "temperature-input":
            try:
                value = float(event.value)
            except ValueError:
                return
            self._publish(temperature=clamp_temperature(value))
        elif event.input.id == "max-tokens-input":
            self._publish(max_tokens=normalize_max_tokens(event.value))

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if event.text_area.id == "system-prompt-input":
            event.stop()
            self._publish(system_prompt=event.text_area.text)

"""Terminal UI module for streamchat.

Provides a Textual-based chat client for the streaming proxy.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (message bubbles, input bar, model controls)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and the dark/light toggle
- app.py: Application orchestration (user interaction flow)
"""

from .app import ChatTextualApp, run_textual_tui
from .themes import THEMES
from .widgets import ChatInputBar, ChatLog, ModelControls

__all__ = [
    "THEMES",
    "ChatInputBar",
    "ChatLog",
    "ChatTextualApp",
    "ModelControls",
    "run_textual_tui",
]

"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout - chat | controls
   ============================================ */
Screen {
    layout: grid;
    grid-size: 2 1;
    grid-columns: 3fr 1fr;
    background: $background;
}

#main-panel {
    height: 100%;
    padding: 0;
}

/* ============================================
   Chat Log Panel
   ============================================ */
#chat-log {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

/* ============================================
   Messages
   ============================================ */
.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 1 2;
    background: transparent;
}

.user-message {
    border-left: tall $success;
    background: $success 8%;

    & .message-header {
        color: $success;
        text-style: bold;
    }
}

.assistant-message {
    border-left: tall $secondary;
    background: $secondary 8%;

    & .message-header {
        color: $secondary;
        text-style: bold;
    }
}

.streaming {
    border-left: tall $accent;
}

.message-header {
    height: auto;
}

.message-content {
    height: auto;
    padding: 0;
    margin: 0;
    color: $foreground;
}

/* ============================================
   Input Area
   ============================================ */
#input-stats {
    height: 1;
    padding: 0 2;
    color: $text-muted;
}

ChatInputBar {
    height: 6;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

#send-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
    border: tall $success;
    background: $success;
    color: $background;
    text-style: bold;
}

#error-banner {
    height: auto;
    padding: 0 2;
    color: $error;
    background: $error 10%;
    border-left: tall $error;
    display: none;
}

/* ============================================
   Model Controls Panel
   ============================================ */
ModelControls {
    height: 100%;
    padding: 0 1;
    background: $panel;
    border: round $secondary 60%;
    border-title-color: $secondary;

    & Label {
        margin-top: 1;
        color: $text-muted;
    }
}

#system-prompt-input {
    height: 8;
}
"""

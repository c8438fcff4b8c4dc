"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Dark/light mode configuration
- Mapping the stored theme choice to a Textual theme name

To add a new theme, define it here and register it in THEMES.
"""

from textual.theme import Theme

# Catppuccin Mocha for dark mode
CATPPUCCIN_MOCHA = Theme(
    name="catppuccin-mocha",
    primary="#89b4fa",      # Blue - main accent
    secondary="#cba6f7",    # Mauve - assistant messages
    accent="#f9e2af",       # Yellow - highlights
    foreground="#cdd6f4",
    background="#11111b",
    success="#a6e3a1",      # Green - user messages, send button
    warning="#fab387",
    error="#f38ba8",
    surface="#1e1e2e",
    panel="#181825",
    dark=True,
    variables={
        "input-cursor-background": "#cdd6f4",
        "input-cursor-foreground": "#11111b",
        "input-selection-background": "#89b4fa 30%",
        "border": "#45475a",
        "border-blurred": "#313244",
        "footer-key-foreground": "#f9e2af",
        "text-muted": "#6c7086",
    },
)

# Catppuccin Latte for light mode
CATPPUCCIN_LATTE = Theme(
    name="catppuccin-latte",
    primary="#1e66f5",
    secondary="#8839ef",
    accent="#df8e1d",
    foreground="#4c4f69",
    background="#eff1f5",
    success="#40a02b",
    warning="#fe640b",
    error="#d20f39",
    surface="#e6e9ef",
    panel="#dce0e8",
    dark=False,
    variables={
        "input-cursor-background": "#4c4f69",
        "input-cursor-foreground": "#eff1f5",
        "input-selection-background": "#1e66f5 30%",
        "border": "#bcc0cc",
        "border-blurred": "#ccd0da",
        "footer-key-foreground": "#df8e1d",
        "text-muted": "#8c8fa1",
    },
)

# Stored theme choice -> Textual theme
THEMES = {
    "dark": CATPPUCCIN_MOCHA,
    "light": CATPPUCCIN_LATTE,
}


def other_theme(choice: str) -> str:
    """The choice the theme toggle switches to."""
    return "light" if choice == "dark" else "dark"

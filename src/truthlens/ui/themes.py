"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register it in the app.
"""

from textual.theme import Theme

# Dark slate palette; red reserved for error notices, amber for the brand accent
TRUTHLENS_DUSK = Theme(
    name="truthlens-dusk",
    primary="#60a5fa",      # Blue - user messages, focus
    secondary="#a78bfa",    # Violet - assistant messages
    accent="#fbbf24",       # Amber - headings, highlights
    foreground="#e5e7eb",
    background="#0b1120",
    success="#34d399",
    warning="#f59e0b",
    error="#f87171",
    surface="#111827",
    panel="#0f172a",
    dark=True,
    variables={
        "border": "#334155",
        "border-blurred": "#1e293b",

        "scrollbar": "#1e293b",
        "scrollbar-hover": "#334155",
        "scrollbar-active": "#60a5fa",
        "scrollbar-background": "#0f172a",

        "footer-background": "#0b1120",
        "footer-key-foreground": "#fbbf24",

        "text-muted": "#94a3b8",

        "link-color": "#60a5fa",
        "link-style": "underline",
        "link-color-hover": "#93c5fd",
    },
)

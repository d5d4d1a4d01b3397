"""Terminal UI module for truthlens.

Provides a Textual-based TUI for interactive analysis.

Module structure (each module hides a design decision):
- config.py: Constants (log levels, labels, limits)
- formatting.py: Markdown subset -> Rich markup
- widgets.py: Custom widgets (message bubbles with reveal, input, status, log)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palette
- callbacks.py: Logging bridge into the log panel
- app.py: Application orchestration (user interaction flow)
"""

from .app import TruthLensApp, run_textual_tui
from .callbacks import LogPanelHandler
from .config import LogLevel
from .formatting import render_markup, to_markup
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, MessageBubble, StatusPanel

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "LogLevel",
    "LogPanelHandler",
    "MessageBubble",
    "StatusPanel",
    "TruthLensApp",
    "render_markup",
    "run_textual_tui",
    "to_markup",
]

"""Logging bridge for the TUI.

Hides the details of how log records from the core modules reach the log
panel. Uses call_from_thread when a record is emitted off the UI thread.
"""

import logging
import threading
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from textual.app import App

    from .widgets import DebugPanel

# Logger name suffix -> short component label shown in the panel
COMPONENTS = {
    "gemini": "Transport",
    "retry": "Retry",
    "interpreter": "Interpreter",
    "state": "Conversation",
    "reveal": "Reveal",
    "pipeline": "Pipeline",
}


def component_for(logger_name: str) -> str:
    """Map a logger name like 'truthlens.analysis.retry' to 'Retry'."""
    suffix = logger_name.rsplit(".", 1)[-1]
    return COMPONENTS.get(suffix, "TUI")


class LogPanelHandler(logging.Handler):
    """logging.Handler that writes records into a DebugPanel."""

    def __init__(self, panel: "DebugPanel", app: "App | None" = None) -> None:
        super().__init__(level=logging.DEBUG)
        self.panel = panel
        self.app = app

    def _call_thread_safe(self, func: Any, *args: Any) -> None:
        if self.app is not None and self.app._thread_id != threading.get_ident():
            self.app.call_from_thread(func, *args)
        else:
            func(*args)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
            self._call_thread_safe(
                self.panel.add_entry, component_for(record.name), message, record.levelno
            )
        except Exception:
            self.handleError(record)

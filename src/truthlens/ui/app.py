"""Main Textual TUI application.

Orchestrates the UI components and feeds user submissions into the
AnalysisPipeline. The conversation log is observed through its subscription
contract; widgets never mutate it directly.
"""

import asyncio
import contextlib
import logging

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header, Static

from ..analysis.errors import RequestInFlightError
from ..conversation.models import ConversationEvent
from ..logging_setup import LOGGER_NAME
from ..pipeline import AnalysisPipeline
from .callbacks import LogPanelHandler
from .config import DISCLAIMER
from .styles import APP_CSS
from .themes import TRUTHLENS_DUSK
from .widgets import (
    ChatHistoryWidget,
    ChatInputBar,
    DebugPanel,
    LogLevel,
    StatusPanel,
    SuggestionBar,
    copy_text,
)


class TruthLensApp(App):
    """Textual TUI for misinformation analysis."""

    CSS = APP_CSS
    TITLE = "Misinformation Detector AI"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+k", "clear_chat", "Clear Chat"),
        Binding("escape", "cancel_request", "Cancel"),
        Binding("ctrl+s", "skip_reveal", "Skip Reveal"),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("ctrl+b", "toggle_maximize_chat", "Max Chat"),
        Binding("ctrl+d", "toggle_debug", "Log"),
    ]

    def __init__(
        self,
        pipeline: AnalysisPipeline,
        reveal_interval: float = 0.02,
        log_level: str | None = None,
    ) -> None:
        super().__init__()
        self._pipeline = pipeline
        self._reveal_interval = reveal_interval
        self._log_level = log_level
        self._unsubscribe = None
        self._log_handler: LogPanelHandler | None = None

    @property
    def pipeline(self) -> AnalysisPipeline:
        return self._pipeline

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatHistoryWidget(id="chat-history", reveal_interval=self._reveal_interval)
        yield DebugPanel(id="debug-panel")

        with Vertical(id="bottom-bar"):
            yield StatusPanel(self._pipeline.transport.name, id="status")
            yield SuggestionBar(self._pipeline.suggestions, id="suggestions")
            yield ChatInputBar(id="chat-input-bar")
            yield Static(DISCLAIMER, id="disclaimer")

        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(TRUTHLENS_DUSK)
        self.theme = "truthlens-dusk"

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()

        # Route package logs into the panel; the panel filters by level
        self._log_handler = LogPanelHandler(log_panel, app=self)
        package_logger = logging.getLogger(LOGGER_NAME)
        package_logger.addHandler(self._log_handler)
        package_logger.setLevel(logging.DEBUG)
        log_panel.add_entry("TUI", f"Log panel ready, level {LogLevel.name(log_panel.log_level)}",
                            LogLevel.INFO)

        policy = self._pipeline.policy
        self.sub_title = f"{self._pipeline.transport.name} | up to {policy.max_attempts} attempts"

        conversation = self._pipeline.conversation
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        for message in conversation.messages:
            chat.add_message(message)
        self._unsubscribe = conversation.subscribe(self._on_conversation_event)

        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def on_unmount(self) -> None:
        """Detach from the conversation and the logging tree."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._log_handler is not None:
            logging.getLogger(LOGGER_NAME).removeHandler(self._log_handler)
            self._log_handler = None

    def _set_busy(self, busy: bool) -> None:
        self.query_one("#chat-input-bar", ChatInputBar).set_busy(busy)
        self.query_one("#suggestions", SuggestionBar).set_busy(busy)
        self.query_one("#chat-history", ChatHistoryWidget).set_analyzing(busy)

    def _on_conversation_event(self, event: ConversationEvent) -> None:
        """Render conversation changes."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        status = self.query_one("#status", StatusPanel)

        if event.kind == "appended" and event.message is not None:
            message = event.message
            animate = not message.is_user and not message.is_error
            chat.add_message(message, animate=animate)

        elif event.kind == "reset":
            chat.clear_history()
            for message in self._pipeline.conversation.messages:
                chat.add_message(message)
            status.reset()
            self._set_busy(False)

        elif event.kind == "request_started":
            status.request_started(self._pipeline.policy.max_attempts)
            self._set_busy(True)

        elif event.kind == "request_finished":
            outcome = self._pipeline.last_outcome
            attempts = outcome.attempts if outcome is not None and event.message is not None else 0
            status.request_finished(event.message, attempts)
            self._set_busy(False)
            if event.message is not None and event.message.is_error:
                self.notify("Analysis failed after multiple attempts", severity="error", timeout=5)
            self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def _submit(self, text: str) -> None:
        if self._pipeline.conversation.in_flight:
            self.notify("Still analyzing the previous text", severity="warning", timeout=3)
            return
        self._run_analysis(text)

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        self._submit(event.value)

    def on_suggestion_bar_selected(self, event: SuggestionBar.Selected) -> None:
        """Quick suggestions behave exactly like typed submissions."""
        self._submit(event.value)

    @work(exclusive=True, group="analysis")
    async def _run_analysis(self, text: str) -> None:
        """Run one pipeline submission as a background async worker."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        try:
            await self._pipeline.submit(text)
        except RequestInFlightError:
            self.notify("Still analyzing the previous text", severity="warning", timeout=3)
        except asyncio.CancelledError:
            self.notify("Cancelled", severity="warning", timeout=2)
        except Exception as e:
            log_panel.add_entry("TUI", f"Unexpected error: {e}", LogLevel.ERROR)
            self.notify(f"Error: {str(e)[:50]}", severity="error", timeout=5)

    def action_clear_chat(self) -> None:
        """Reset the conversation to the greeting."""
        self.workers.cancel_group(self, "analysis")
        self._pipeline.conversation.reset()
        self.notify("Chat cleared", timeout=2)

    def action_cancel_request(self) -> None:
        """Cancel the request in flight."""
        if not self._pipeline.conversation.in_flight:
            return
        self._pipeline.cancel()
        self.workers.cancel_group(self, "analysis")

    def action_skip_reveal(self) -> None:
        """Show the reply being revealed in full."""
        self.query_one("#chat-history", ChatHistoryWidget).skip_reveal()

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_toggle_maximize_chat(self) -> None:
        """Toggle maximize for the chat panel."""
        bottom = self.query_one("#bottom-bar", Vertical)
        bottom.display = not bottom.display

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        response = self._pipeline.conversation.latest_bot_message()
        if response is not None:
            copy_text(self, response.text, "Response")
        else:
            self.notify("No response to copy", severity="warning")


async def run_textual_tui(
    pipeline: AnalysisPipeline,
    reveal_interval: float = 0.02,
    log_level: str | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        pipeline: Configured analysis pipeline (owns transport and conversation)
        reveal_interval: Seconds between reveal ticks
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = TruthLensApp(
        pipeline=pipeline,
        reveal_interval=reveal_interval,
        log_level=log_level,
    )
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        with contextlib.suppress(BaseException):
            await pipeline.close()

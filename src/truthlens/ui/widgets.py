"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history management
- Chat message rendering and the per-message reveal
- Source list placement
- Status and log rendering
"""

from datetime import datetime

import pyperclip
from rich.text import Text
from textual.app import App
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message as TextualMessage
from textual.widgets import Button, RichLog, Static, TextArea

from ..conversation.models import Message
from ..reveal import RevealScheduler
from .config import (
    INPUT_HISTORY_MAX_SIZE,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    MESSAGE_TIMESTAMP_FORMAT,
    SUGGESTION_LABEL_LENGTH,
    LogLevel,
)
from .formatting import render_markup, render_sources


def copy_text(app: App, text: str, what: str) -> None:
    """Copy to the system clipboard, falling back to the terminal (OSC 52)."""
    try:
        pyperclip.copy(text)
        app.notify(f"{what} copied", timeout=2)
    except pyperclip.PyperclipException:
        app.copy_to_clipboard(text)
        app.notify(f"{what} copied (terminal)", timeout=2)


class MessageBubble(Vertical):
    """One chat message: header, body, and (for bot replies) its sources.

    Sources are mounted only once the body is fully shown, so citations never
    appear ahead of the text they support. Clicking copies the raw text.
    """

    def __init__(self, message: Message, revealed: bool = True, **kwargs) -> None:
        if message.is_user:
            kind = "user-message"
        elif message.is_error:
            kind = "error-message"
        else:
            kind = "assistant-message"
        super().__init__(classes=f"chat-message {kind}", **kwargs)
        self.message = message
        self._revealed = revealed
        self._body = Static(
            render_markup(message.text) if revealed else "",
            classes="message-content",
        )

    def compose(self):
        msg = self.message
        if msg.is_user:
            header = f"You [{msg.timestamp.strftime(MESSAGE_TIMESTAMP_FORMAT)}] >"
        elif msg.is_error:
            header = f"! Error [{msg.timestamp.strftime(MESSAGE_TIMESTAMP_FORMAT)}]"
        else:
            header = f"< Analyst [{msg.timestamp.strftime(MESSAGE_TIMESTAMP_FORMAT)}]"
        yield Static(Text(header), classes="message-header")
        yield self._body
        if self._revealed and msg.sources:
            yield Static(render_sources(msg.sources), classes="message-sources")

    def show_prefix(self, visible: int) -> None:
        """Show the first `visible` characters of the message."""
        self._body.update(render_markup(self.message.text[:visible]))

    def finish(self) -> None:
        """Show the whole message and mount its sources (idempotent)."""
        if self._revealed:
            return
        self._revealed = True
        self._body.update(render_markup(self.message.text))
        if self.message.sources and self.is_mounted:
            self.mount(Static(render_sources(self.message.sources), classes="message-sources"))

    def on_click(self, event: Click) -> None:
        """Copy message text to the clipboard when clicked."""
        event.stop()
        copy_text(self.app, self.message.text, "Message")


class ChatHistoryWidget(VerticalScroll):
    """Scrollable chat history, oldest message first.

    Owns the RevealScheduler: only the newest bot reply animates, and a new
    reply finishes the previous one at once.
    """

    BORDER_TITLE = "Analysis"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, reveal_interval: float = 0.02, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._scheduler = RevealScheduler(interval=reveal_interval)
        self._revealing: MessageBubble | None = None
        self._indicator: Static | None = None
        self._message_count = 0

    def add_message(self, message: Message, animate: bool = False) -> MessageBubble:
        """Append a message; bot replies may be revealed progressively."""
        self.set_analyzing(False)
        bubble = MessageBubble(message, revealed=not animate)
        self.mount(bubble)
        self._message_count += 1
        self.border_subtitle = f"{self._message_count} messages"
        if animate:
            self._start_reveal(bubble)
        self.scroll_end(animate=False)
        return bubble

    def _start_reveal(self, bubble: MessageBubble) -> None:
        if self._revealing is not None:
            self._revealing.finish()
        self._revealing = bubble
        self.run_worker(self._reveal(bubble), group="reveal", exclusive=True)

    async def _reveal(self, bubble: MessageBubble) -> None:
        def on_tick(visible: int) -> None:
            bubble.show_prefix(visible)
            self.scroll_end(animate=False)

        completed = await self._scheduler.play(bubble.message.text, on_tick)
        if completed:
            bubble.finish()
            if self._revealing is bubble:
                self._revealing = None
            self.scroll_end(animate=False)

    def skip_reveal(self) -> None:
        """Finish the running reveal immediately."""
        if self._revealing is not None:
            self._scheduler.cancel()
            self._revealing.finish()
            self._revealing = None

    def set_analyzing(self, active: bool) -> None:
        """Show or hide the "Analyzing..." placeholder below the last message."""
        if active and self._indicator is None:
            self._indicator = Static("Analyzing...", id="analyzing")
            self.mount(self._indicator)
            self.scroll_end(animate=False)
        elif not active and self._indicator is not None:
            self._indicator.remove()
            self._indicator = None

    def clear_history(self) -> None:
        """Remove every message and stop any reveal."""
        self._scheduler.cancel()
        self._revealing = None
        self._indicator = None
        self._message_count = 0
        self.remove_children()
        self.border_subtitle = "Conversation history"


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(TextualMessage):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Analyze", id="send-btn", variant="success").with_tooltip(
            "Submit text (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.highlight_cursor_line = False
        text_area.focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            event.stop()
            self._submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        return text_area.cursor_location == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:  # Up
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:  # Down
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        if self.query_one("#send-btn", Button).disabled:
            return
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if value:
            if not self._history or self._history[-1] != value:
                self._history.append(value)
                del self._history[:-INPUT_HISTORY_MAX_SIZE]
            self._history_index = -1
            text_area.text = ""
            self.post_message(self.Submitted(value))

    def set_busy(self, busy: bool) -> None:
        """Block submission while a request is in flight."""
        self.query_one("#send-btn", Button).disabled = busy
        self.query_one("#chat-input", TextArea).read_only = busy

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", TextArea).focus()


class SuggestionBar(Horizontal):
    """Quick suggestion buttons; selecting one acts like typing and submitting it."""

    class Selected(TextualMessage):
        """Message sent when a suggestion is chosen."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, suggestions: tuple[str, ...], *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._suggestions = suggestions

    def compose(self):
        for i, text in enumerate(self._suggestions):
            label = text if len(text) <= SUGGESTION_LABEL_LENGTH else text[:SUGGESTION_LABEL_LENGTH - 3] + "..."
            yield Button(label, id=f"suggestion-{i}").with_tooltip(text)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if button_id.startswith("suggestion-"):
            event.stop()
            index = int(button_id.removeprefix("suggestion-"))
            self.post_message(self.Selected(self._suggestions[index]))

    def set_busy(self, busy: bool) -> None:
        for button in self.query(Button):
            button.disabled = busy


class StatusPanel(Static):
    """One-line status: model, request state, attempts, sources, timing."""

    def __init__(self, model_name: str, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._model_name = model_name
        self._state = "Idle"
        self._attempts = 0
        self._max_attempts = 0
        self._sources = 0
        self._elapsed = 0.0
        self._started: datetime | None = None

    def on_mount(self) -> None:
        self._update_display()

    def request_started(self, max_attempts: int) -> None:
        self._state = "Analyzing"
        self._max_attempts = max_attempts
        self._started = datetime.now()
        self._update_display()

    def request_finished(self, message: Message | None, attempts: int = 0) -> None:
        if self._started is not None:
            self._elapsed = (datetime.now() - self._started).total_seconds()
        self._started = None
        self._attempts = attempts
        if message is None:
            self._state = "Cancelled"
            self._sources = 0
        else:
            self._state = "Failed" if message.is_error else "Done"
            self._sources = len(message.sources)
        self._update_display()

    def reset(self) -> None:
        self._state = "Idle"
        self._attempts = 0
        self._sources = 0
        self._elapsed = 0.0
        self._started = None
        self._update_display()

    def _update_display(self) -> None:
        state_colors = {
            "Idle": "dim",
            "Analyzing": "bold yellow",
            "Done": "bold green",
            "Failed": "bold red",
            "Cancelled": "yellow",
        }
        color = state_colors.get(self._state, "white")
        parts = [
            f"[bold cyan]Model:[/] {self._model_name}",
            f"[bold]State:[/] [{color}]{self._state}[/]",
        ]
        if self._attempts:
            parts.append(f"[bold magenta]Attempts:[/] {self._attempts}/{self._max_attempts}")
        if self._state in ("Done", "Failed"):
            parts.append(f"[bold blue]Sources:[/] {self._sources}")
            parts.append(f"[bold yellow]Time:[/] {self._elapsed:.2f}s")
        self.update(Text.from_markup("  ".join(parts)))


class DebugPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Shows timestamped records from all components.
    Supports standard log levels: DEBUG < INFO < WARNING < ERROR.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def add_entry(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold.

        Args:
            component: Short component name (Transport, Retry, Reveal, ...)
            message: Log message
            level: Numeric log level
        """
        if level < self._log_level:
            return

        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."
        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)[:-3]  # milliseconds

        level_colors = {
            "DEBUG": "dim white",
            "INFO": "cyan",
            "WARNING": "yellow",
            "ERROR": "red",
        }
        level_name = LogLevel.name(level)
        level_color = level_colors.get(level_name, "white")

        component_colors = {
            "TUI": "cyan",
            "Transport": "magenta",
            "Retry": "yellow",
            "Interpreter": "bright_blue",
            "Conversation": "bright_green",
            "Reveal": "bright_cyan",
            "Pipeline": "green",
        }
        comp_color = component_colors.get(component, "white")

        line = Text()
        line.append(f"{timestamp} ", style="dim")
        line.append(f"{level_name:<7} ", style=level_color)
        line.append(f"[{component}] ", style=comp_color)
        line.append(message)
        self.write(line)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True

    def on_click(self, event: Click) -> None:
        """Copy log content to clipboard when clicked."""
        event.stop()
        text = "\n".join(line.text for line in self.lines)
        if not text.strip():
            self.app.notify("Log is empty", timeout=2)
            return
        copy_text(self.app, text, "Log")

"""Text formatting utilities for the TUI.

Hides the details of how the markdown subset used by the analyst prompt is
turned into Rich console markup.
"""

import re
from collections.abc import Iterable

from rich.errors import MarkupError
from rich.markup import escape
from rich.style import Style
from rich.text import Text

from ..analysis.models import Source
from .config import SOURCES_HEADING

# Block rules apply per line, before inline emphasis
_HEADING = re.compile(r"^## (.*)$", re.MULTILINE)
_BULLET = re.compile(r"^\* (.*)$", re.MULTILINE)
_NUMBERED = re.compile(r"^(\d+)\. (.*)$", re.MULTILINE)

_BOLD = re.compile(r"\*\*(.*?)\*\*")
_ITALIC = re.compile(r"\*(.*?)\*")


def to_markup(text: str) -> str:
    """Convert the supported markdown subset to Rich markup.

    Supported: **bold**, *italics*, "## " headings, "* " bullets, "1. "
    numbered items and line breaks. Anything else is shown literally; Rich
    markup already present in the text is escaped.
    """
    text = escape(text)
    text = _HEADING.sub(r"[bold underline]\1[/bold underline]", text)
    text = _BULLET.sub(r"  • \1", text)
    text = _NUMBERED.sub(r"  \1. \2", text)
    text = _BOLD.sub(r"[bold]\1[/bold]", text)
    text = _ITALIC.sub(r"[italic]\1[/italic]", text)
    return text


def render_markup(text: str) -> Text:
    """Render the markdown subset as a Rich Text.

    Falls back to plain text if the produced markup does not parse.
    """
    try:
        return Text.from_markup(to_markup(text), overflow="fold")
    except MarkupError:
        return Text(text, overflow="fold")


def render_sources(sources: Iterable[Source], heading: str = SOURCES_HEADING) -> Text:
    """Render a source list as a Rich Text: a heading plus one link per line.

    Links are attached as styles, so URIs and titles are never parsed as markup.
    """
    text = Text(overflow="fold")
    text.append(heading, style=Style(bold=True))
    for source in sources:
        text.append("\n  ")
        text.append(source.title, style=Style(link=source.uri))
    return text

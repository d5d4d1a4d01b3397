"""Main CLI application using Typer."""
import asyncio
import sys

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live
from rich.table import Table
from rich.text import Text

from ..conversation.models import Message
from ..logging_setup import configure_logging
from ..pipeline import DEFAULT_SUGGESTIONS
from ..reveal import RevealScheduler
from ..ui.formatting import render_markup, render_sources
from .providers import build_pipeline, get_settings

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="truthlens",
    help="Analyze text for misinformation with a search-grounded language model",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


def _setup_logging(log_level: str) -> None:
    try:
        configure_logging(log_level)
    except ValueError:
        console.print(f"[red]Error: unknown log level: {log_level}[/red]")
        raise typer.Exit(code=1)


async def _reveal(message: Message, interval: float) -> None:
    """Print a bot message progressively, then its sources."""
    scheduler = RevealScheduler(interval=interval)
    with Live(Text(""), console=console, refresh_per_second=30) as live:
        await scheduler.play(
            message.text,
            lambda visible: live.update(render_markup(message.text[:visible])),
        )
    if message.sources:
        console.print()
        console.print(render_sources(message.sources))


@app.command()
def analyze(
    text: str = typer.Argument(
        None,
        help="Text to analyze ('-' reads standard input)"
    ),
    suggestion: int | None = typer.Option(
        None,
        "--suggestion",
        "-s",
        min=1,
        max=len(DEFAULT_SUGGESTIONS),
        help="Analyze one of the built-in example claims instead (1-based)"
    ),
    animate: bool = typer.Option(
        True,
        "--animate/--no-animate",
        help="Reveal the answer character by character"
    ),
    max_attempts: int | None = typer.Option(
        None,
        "--max-attempts",
        "-a",
        help="Attempts before giving up (overrides TRUTHLENS_MAX_ATTEMPTS)"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Console log level: debug, info, warning or error"
    ),
):
    """Analyze a single text and print the assessment."""
    settings = get_settings(console, max_attempts=max_attempts, log_level=log_level)
    _setup_logging(settings.log_level)

    if suggestion is not None:
        text = DEFAULT_SUGGESTIONS[suggestion - 1]
    elif text == "-":
        text = sys.stdin.read()
    if not text or not text.strip():
        console.print("[red]Error: nothing to analyze[/red]")
        raise typer.Exit(code=1)

    async def _analyze():
        pipeline = build_pipeline(settings, console)
        try:
            with console.status("[dim]Analyzing...[/dim]"):
                message = await pipeline.submit(text)

            if message is None:
                console.print("[yellow]Request was cancelled[/yellow]")
                raise typer.Exit(code=1)

            if message.is_error:
                reason = getattr(pipeline.last_outcome, "reason", "")
                console.print(f"[bold red]{message.text}[/bold red]")
                if reason:
                    console.print(f"[dim]{reason}[/dim]")
                raise typer.Exit(code=1)

            if animate:
                await _reveal(message, settings.reveal_interval)
            else:
                console.print(render_markup(message.text))
                if message.sources:
                    console.print()
                    console.print(render_sources(message.sources))
        finally:
            await pipeline.close()

    asyncio.run(_analyze())


@app.command()
def suggestions():
    """List the built-in example claims."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=3)
    table.add_column("Claim")
    for i, claim in enumerate(DEFAULT_SUGGESTIONS, 1):
        table.add_row(str(i), claim)
    console.print(table)


@app.command()
def health():
    """Check configuration."""
    settings = get_settings(console)

    if settings.api_key:
        console.print("[green]+[/green] Gemini API key: SET")
    else:
        console.print("[yellow]![/yellow] Gemini API key: NOT SET")

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="bold cyan", width=18)
    table.add_column("Value")
    table.add_row("Model", settings.model)
    table.add_row("Endpoint", settings.endpoint_url or "(derived from model)")
    table.add_row("Timeout", f"{settings.timeout:g}s")
    table.add_row("Max attempts", str(settings.max_attempts))
    table.add_row(
        "Backoff",
        f"{settings.base_delay:g}s x {settings.multiplier:g}^k, cap {settings.max_delay:g}s",
    )
    table.add_row("Reveal interval", f"{settings.reveal_interval:g}s")
    console.print(table)

    if not settings.api_key:
        raise typer.Exit(code=1)


@app.command(name="tui")
def tui_command(
    max_attempts: int | None = typer.Option(
        None,
        "--max-attempts",
        "-a",
        help="Attempts before giving up (overrides TRUTHLENS_MAX_ATTEMPTS)"
    ),
    reveal_interval: float | None = typer.Option(
        None,
        "--reveal-interval",
        "-r",
        help="Seconds per revealed character (overrides TRUTHLENS_REVEAL_INTERVAL)"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch interactive TUI chat interface."""
    settings = get_settings(
        console, max_attempts=max_attempts, reveal_interval=reveal_interval
    )

    async def _tui():
        from ..ui import run_textual_tui

        pipeline = build_pipeline(settings, console)
        try:
            await run_textual_tui(
                pipeline=pipeline,
                reveal_interval=settings.reveal_interval,
                log_level=log_level,
            )
        finally:
            console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_tui())
    except KeyboardInterrupt:
        pass


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

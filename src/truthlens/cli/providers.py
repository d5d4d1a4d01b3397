"""Provider factory functions for CLI.

Centralizes creation of settings, transport and pipeline instances from
environment variables. Hides configuration details from command
implementations.
"""

from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console

from ..analysis import AnalysisTransport, create_transport
from ..analysis.errors import ConfigurationError
from ..pipeline import AnalysisPipeline
from ..settings import Settings, load_settings

# Default console for output
_console = Console()


def get_settings(console: Console | None = None, **overrides: Any) -> Settings:
    """Load settings from the environment, exiting on invalid values.

    Environment variables:
        GEMINI_API_KEY: Gemini API key (required for analysis)
        GEMINI_MODEL: Model name (default: gemini-2.5-flash)
        TRUTHLENS_ENDPOINT_URL: Full endpoint URL override
        TRUTHLENS_TIMEOUT: Request timeout in seconds (default: 60)
        TRUTHLENS_MAX_ATTEMPTS: Attempts per request (default: 5)
        TRUTHLENS_BASE_DELAY / TRUTHLENS_BACKOFF_MULTIPLIER / TRUTHLENS_MAX_DELAY:
            Backoff schedule (default: 0.1 / 2.0 / 8.0)
        TRUTHLENS_REVEAL_INTERVAL: Seconds per revealed character (default: 0.02)
        TRUTHLENS_LOG_LEVEL: Console log level (default: WARNING)
    """
    con = console or _console
    try:
        return load_settings(**overrides)
    except ValidationError as e:
        con.print("[red]Error: invalid configuration[/red]")
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            con.print(f"[red]  {field}: {error['msg']}[/red]")
        raise typer.Exit(code=1)


def get_transport(settings: Settings, console: Console | None = None) -> AnalysisTransport:
    """Create the analysis transport.

    Raises:
        SystemExit: If GEMINI_API_KEY is not set
    """
    con = console or _console
    try:
        config = settings.transport_config()
    except ConfigurationError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
    return create_transport("gemini", **config)


def build_pipeline(settings: Settings, console: Console | None = None) -> AnalysisPipeline:
    """Create a pipeline with a fresh conversation."""
    return AnalysisPipeline(
        transport=get_transport(settings, console),
        policy=settings.backoff_policy,
    )

"""Prompt templates for analysis requests.

Hides where the system instruction and the request template live. Both ship
as .txt files next to this module; a ./prompts/<name>.txt file in the working
directory replaces the packaged copy.
"""

from functools import lru_cache
from pathlib import Path

PACKAGE_DIR = Path(__file__).parent
OVERRIDE_DIRNAME = "prompts"

SYSTEM_PROMPT = "analyst_system"
REQUEST_TEMPLATE = "analysis_request"
TEXT_PLACEHOLDER = "{text}"


def prompt_paths(name: str) -> tuple[Path, Path]:
    """Candidate files for a prompt, override first."""
    filename = f"{name}.txt"
    return Path.cwd() / OVERRIDE_DIRNAME / filename, PACKAGE_DIR / filename


@lru_cache(maxsize=8)
def load_prompt(name: str) -> str:
    """Read a prompt by name (no extension).

    Raises:
        FileNotFoundError: If neither the override nor the packaged file exists
    """
    candidates = prompt_paths(name)
    for path in candidates:
        if path.is_file():
            return path.read_text(encoding="utf-8")
    searched = ", ".join(str(p) for p in candidates)
    raise FileNotFoundError(f"No prompt named {name!r} (looked in {searched})")


def get_system_prompt() -> str:
    """System instruction sent with every analysis request."""
    return load_prompt(SYSTEM_PROMPT).strip()


def render_request(text: str) -> str:
    """The user turn: the request template with `text` substituted."""
    return load_prompt(REQUEST_TEMPLATE).rstrip("\n").replace(TEXT_PLACEHOLDER, text)


__all__ = [
    "get_system_prompt",
    "load_prompt",
    "prompt_paths",
    "render_request",
]

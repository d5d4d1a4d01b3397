"""Pytest configuration and shared fixtures."""
import os

import pytest

from truthlens.analysis import AnalysisTransport, CandidatePayload, NetworkError


def make_response(text=None, grounding=None, extra_parts=()):
    """Build a generateContent response body."""
    candidate = {}
    if text is not None:
        candidate["content"] = {"parts": [{"text": text}, *extra_parts], "role": "model"}
    if grounding is not None:
        candidate["groundingMetadata"] = grounding
    return {"candidates": [candidate]}


def make_payload(text=None, grounding=None):
    """Build the CandidatePayload a transport would return."""
    body = make_response(text, grounding)
    candidate = body["candidates"][0]
    return CandidatePayload(
        content=candidate.get("content"),
        grounding_metadata=candidate.get("groundingMetadata"),
        raw=body,
    )


class ScriptedTransport(AnalysisTransport):
    """Transport that replays a script of payloads and exceptions."""

    def __init__(self, script):
        self.script = list(script)
        self.calls: list[str] = []
        self.closed = False

    @property
    def name(self) -> str:
        return "scripted"

    async def analyze(self, text: str) -> CandidatePayload:
        self.calls.append(text)
        step = self.script.pop(0) if self.script else NetworkError("script exhausted")
        if isinstance(step, BaseException):
            raise step
        return step

    async def close(self) -> None:
        self.closed = True


class RecordingSleep:
    """Async sleep replacement that records requested delays and returns at once."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleep():
    """Return a recording no-op sleep."""
    return RecordingSleep()


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "gemini": os.getenv("GEMINI_API_KEY"),
    }


@pytest.fixture
def celery_payload():
    """Successful payload grounded only by a search query."""
    return make_payload(
        "## Assessment\nLow Risk",
        grounding={"webSearchQueries": ["celery juice claim"]},
    )

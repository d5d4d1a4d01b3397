"""Google Gemini analysis transport.

Talks to the REST :generateContent endpoint directly with httpx so that the
raw grounding metadata reaches the interpreter untouched.
Reference: https://ai.google.dev/api/generate-content

Note: one call per invocation. Empty or malformed bodies are reported as
ProtocolError and left to the retry controller.
"""

import logging
from typing import Any

import httpx

from ..prompts import get_system_prompt, render_request
from .base import AnalysisTransport
from .errors import NetworkError, ProtocolError
from .models import CandidatePayload

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
ENDPOINT_TEMPLATE = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

# Longest slice of an error body kept in exception messages
_ERROR_BODY_LIMIT = 300


class GeminiTransport(AnalysisTransport):
    """Gemini transport with Google Search grounding enabled.

    Hidden design decisions:
    - Endpoint URL layout and API key placement
    - Request body shape (contents, tools, systemInstruction)
    - Which part of the response counts as "the candidate"
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        endpoint_url: str | None = None,
        timeout: float = 60.0,
        system_prompt: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize Gemini transport.

        Args:
            api_key: Google AI API key (sent as the `key` query parameter)
            model: Model name used to build the default endpoint
            endpoint_url: Full endpoint URL; overrides the model-derived one
            timeout: Per-request timeout in seconds
            system_prompt: System instruction; defaults to the packaged prompt
            client: Pre-built httpx client (tests inject a MockTransport here)
        """
        self._api_key = api_key
        self._model = model
        self._endpoint_url = endpoint_url or ENDPOINT_TEMPLATE.format(model=model)
        self._system_prompt = system_prompt
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def name(self) -> str:
        return self._model

    @property
    def endpoint_url(self) -> str:
        return self._endpoint_url

    def build_payload(self, text: str) -> dict[str, Any]:
        """Build the JSON request body for one analysis."""
        system_prompt = self._system_prompt or get_system_prompt()
        return {
            "contents": [{"parts": [{"text": render_request(text)}]}],
            "tools": [{"google_search": {}}],
            "systemInstruction": {"parts": [{"text": system_prompt}]},
        }

    async def analyze(self, text: str) -> CandidatePayload:
        """Send one generateContent request and return the first candidate."""
        payload = self.build_payload(text)
        logger.debug("POST %s (%d chars of input)", self._endpoint_url, len(text))

        try:
            response = await self._client.post(
                self._endpoint_url,
                params={"key": self._api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            raise NetworkError(f"Request failed: {type(e).__name__}: {e}") from e

        if not response.is_success:
            body = response.text[:_ERROR_BODY_LIMIT]
            raise NetworkError(
                f"HTTP error! status: {response.status_code} {body}".rstrip(),
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProtocolError("Response body is not valid JSON") from e

        return self._first_candidate(data)

    def _first_candidate(self, data: Any) -> CandidatePayload:
        """Pick the first candidate out of a decoded response body."""
        if not isinstance(data, dict):
            raise ProtocolError("Response body is not a JSON object")

        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            feedback = data.get("promptFeedback")
            detail = f" (promptFeedback: {feedback})" if feedback else ""
            raise ProtocolError(f"Invalid response structure from API: no candidates{detail}")

        candidate = candidates[0]
        if not isinstance(candidate, dict):
            raise ProtocolError("Invalid response structure from API: malformed candidate")

        return CandidatePayload(
            content=candidate.get("content"),
            grounding_metadata=candidate.get("groundingMetadata"),
            raw=data,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

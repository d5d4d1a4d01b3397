"""Tests for the Gemini REST transport, using httpx.MockTransport."""
import json

import httpx
import pytest

from conftest import make_response
from truthlens.analysis import (
    GeminiTransport,
    NetworkError,
    ProtocolError,
    create_transport,
)


def make_transport(handler, **kwargs) -> GeminiTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiTransport(api_key="test-key", client=client, system_prompt="SYSTEM", **kwargs)


class TestRequestShape:
    """Tests for what goes over the wire."""

    @pytest.mark.asyncio
    async def test_post_body_and_key(self):
        """Test endpoint, key placement, grounding tool and embedded text."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json=make_response("Assessment"))

        async with make_transport(handler) as transport:
            await transport.analyze("The moon is made of cheese")

        request = seen["request"]
        assert request.method == "POST"
        assert request.url.params["key"] == "test-key"
        assert request.url.path.endswith("/models/gemini-2.5-flash:generateContent")

        body = json.loads(request.content)
        assert body["tools"] == [{"google_search": {}}]
        assert body["systemInstruction"] == {"parts": [{"text": "SYSTEM"}]}
        prompt = body["contents"][0]["parts"][0]["text"]
        assert prompt.startswith("Please analyze the following text:")
        assert prompt.endswith("The moon is made of cheese")

    @pytest.mark.asyncio
    async def test_endpoint_override(self):
        urls = []

        def handler(request):
            urls.append(str(request.url))
            return httpx.Response(200, json=make_response("x"))

        transport = make_transport(handler, endpoint_url="http://localhost:9999/generate")
        await transport.analyze("text")
        await transport.close()

        assert urls[0].startswith("http://localhost:9999/generate?")

    def test_default_system_prompt_is_packaged(self):
        transport = GeminiTransport(api_key="k", client=httpx.AsyncClient())
        system = transport.build_payload("x")["systemInstruction"]["parts"][0]["text"]
        assert "misinformation" in system.lower()


class TestResponseHandling:
    """Tests for mapping responses to payloads and errors."""

    @pytest.mark.asyncio
    async def test_first_candidate_returned(self):
        grounding = {"webSearchQueries": ["q"]}
        body = make_response("First", grounding)
        body["candidates"].append({"content": {"parts": [{"text": "Second"}]}})

        transport = make_transport(lambda request: httpx.Response(200, json=body))
        payload = await transport.analyze("text")

        assert payload.content["parts"][0]["text"] == "First"
        assert payload.grounding_metadata == grounding
        assert payload.raw == body

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        """Test that a non-success status is a retryable network error."""
        transport = make_transport(lambda request: httpx.Response(503, text="overloaded"))

        with pytest.raises(NetworkError) as exc_info:
            await transport.analyze("text")

        assert exc_info.value.status_code == 503
        assert "status: 503" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NetworkError) as exc_info:
            await make_transport(handler).analyze("text")
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        transport = make_transport(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(ProtocolError):
            await transport.analyze("text")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {},
        {"candidates": []},
        {"candidates": "nope"},
        {"candidates": [None]},
        {"promptFeedback": {"blockReason": "SAFETY"}},
        [1, 2, 3],
    ])
    async def test_missing_candidates(self, body):
        """Test that bodies without a usable candidate are protocol errors."""
        transport = make_transport(lambda request: httpx.Response(200, json=body))

        with pytest.raises(ProtocolError):
            await transport.analyze("text")


class TestFactory:
    """Tests for create_transport."""

    def test_create_gemini(self):
        transport = create_transport("gemini", api_key="k", model="gemini-test")
        assert isinstance(transport, GeminiTransport)
        assert transport.name == "gemini-test"
        assert "gemini-test:generateContent" in transport.endpoint_url

    def test_missing_api_key(self):
        with pytest.raises(TypeError):
            create_transport("gemini")

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            create_transport("openai", api_key="k")

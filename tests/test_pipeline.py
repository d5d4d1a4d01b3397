"""End-to-end tests for AnalysisPipeline with a scripted transport."""
import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from conftest import RecordingSleep, ScriptedTransport, make_payload
from truthlens.analysis import (
    AnalysisTransport,
    BackoffPolicy,
    CandidatePayload,
    NetworkError,
    ProtocolError,
    RequestInFlightError,
    Source,
    Success,
)
from truthlens.conversation import DEFAULT_GREETING, FAILURE_TEXT
from truthlens.pipeline import DEFAULT_SUGGESTIONS, AnalysisPipeline
from truthlens.reveal import RevealScheduler

CLAIM = "Scientists confirm that drinking celery juice every morning cures all chronic diseases."


class GatedTransport(AnalysisTransport):
    """Transport that blocks until released, to observe a request in flight."""

    def __init__(self, payload: CandidatePayload):
        self.payload = payload
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = 0

    @property
    def name(self) -> str:
        return "gated"

    async def analyze(self, text: str) -> CandidatePayload:
        self.calls += 1
        self.started.set()
        await self.release.wait()
        return self.payload

    async def close(self) -> None:
        pass


class TestSubmit:
    """Tests for AnalysisPipeline.submit."""

    @pytest.mark.asyncio
    async def test_two_failures_then_grounded_success(self, celery_payload):
        """Test the full path: retries, search grounding, and a complete reveal."""
        sleep = RecordingSleep()
        transport = ScriptedTransport([
            NetworkError("HTTP error! status: 503", status_code=503),
            NetworkError("HTTP error! status: 503", status_code=503),
            celery_payload,
        ])
        pipeline = AnalysisPipeline(transport, sleep=sleep)

        message = await pipeline.submit(CLAIM)

        assert len(transport.calls) == 3
        assert sleep.delays == pytest.approx([0.2, 0.4])
        assert isinstance(pipeline.last_outcome, Success)
        assert pipeline.last_outcome.attempts == 3

        messages = pipeline.conversation.messages
        assert [m.text for m in messages] == [DEFAULT_GREETING, CLAIM, message.text]
        assert messages[1].is_user
        assert message.text == "## Assessment\nLow Risk"
        assert message.sources == (Source(
            uri="https://www.google.com/search?q=celery%20juice%20claim",
            title="celery juice claim",
        ),)

        scheduler = RevealScheduler(sleep=RecordingSleep())
        lengths = []
        assert await scheduler.play(message.text, lengths.append)
        assert lengths[-1] == len(message.text)

    @pytest.mark.asyncio
    async def test_terminal_failure_appends_error(self):
        """Test that exhausting the budget yields exactly one error message."""
        transport = ScriptedTransport([NetworkError("down")] * 3)
        pipeline = AnalysisPipeline(
            transport, policy=BackoffPolicy(max_attempts=3), sleep=RecordingSleep()
        )

        message = await pipeline.submit("Some claim")

        assert len(transport.calls) == 3
        assert message.is_error
        assert message.text == FAILURE_TEXT
        assert message.sources == ()
        assert pipeline.last_outcome.reason == "down"
        assert len(pipeline.conversation) == 3
        assert not pipeline.conversation.in_flight

    @pytest.mark.asyncio
    async def test_malformed_payload_is_retried(self):
        transport = ScriptedTransport([make_payload(None), make_payload("Fine")])
        pipeline = AnalysisPipeline(transport, sleep=RecordingSleep())

        message = await pipeline.submit("claim")

        assert message.text == "Fine"
        assert len(transport.calls) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_input_is_ignored(self, text):
        transport = ScriptedTransport([])
        pipeline = AnalysisPipeline(transport, sleep=RecordingSleep())

        assert await pipeline.submit(text) is None
        assert transport.calls == []
        assert len(pipeline.conversation) == 1

    @pytest.mark.asyncio
    async def test_input_is_trimmed(self):
        transport = ScriptedTransport([make_payload("ok")])
        pipeline = AnalysisPipeline(transport, sleep=RecordingSleep())

        await pipeline.submit("  claim  \n")

        assert transport.calls == ["claim"]
        assert pipeline.conversation.messages[1].text == "claim"

    @pytest.mark.asyncio
    async def test_suggestion_is_submitted_verbatim(self):
        transport = ScriptedTransport([make_payload("ok")])
        pipeline = AnalysisPipeline(transport, sleep=RecordingSleep())

        await pipeline.submit_suggestion(1)

        assert transport.calls == [DEFAULT_SUGGESTIONS[1]]


class TestConcurrency:
    """Tests for the single in-flight request rule."""

    @pytest.mark.asyncio
    async def test_second_submit_rejected_while_in_flight(self):
        transport = GatedTransport(make_payload("done"))
        pipeline = AnalysisPipeline(transport, sleep=RecordingSleep())

        first = asyncio.create_task(pipeline.submit("first"))
        await transport.started.wait()

        with pytest.raises(RequestInFlightError):
            await pipeline.submit("second")
        assert [m.text for m in pipeline.conversation.messages][1:] == ["first"]

        transport.release.set()
        message = await first
        assert message.text == "done"

    @pytest.mark.asyncio
    async def test_reset_mid_flight_drops_result(self):
        """Test that a late result is not appended after a reset."""
        transport = GatedTransport(make_payload("late"))
        pipeline = AnalysisPipeline(transport, sleep=RecordingSleep())

        task = asyncio.create_task(pipeline.submit("claim"))
        await transport.started.wait()
        pipeline.conversation.reset()
        transport.release.set()

        assert await task is None
        assert len(pipeline.conversation) == 1
        assert not pipeline.conversation.in_flight
        assert pipeline.last_outcome is None

    @pytest.mark.asyncio
    async def test_cancel_stops_retries(self):
        """Test that a cancelled request makes no further attempts."""
        transport = ScriptedTransport([ProtocolError("bad")] * 5)

        async def cancel_on_sleep(delay):
            pipeline.cancel()

        pipeline = AnalysisPipeline(transport, sleep=cancel_on_sleep)

        assert await pipeline.submit("claim") is None
        assert len(transport.calls) == 1
        assert [m.text for m in pipeline.conversation.messages] == [DEFAULT_GREETING, "claim"]

    @pytest.mark.asyncio
    async def test_task_cancellation_releases_slot(self):
        transport = GatedTransport(make_payload("never"))
        pipeline = AnalysisPipeline(transport, sleep=RecordingSleep())

        task = asyncio.create_task(pipeline.submit("claim"))
        await transport.started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert not pipeline.conversation.in_flight
        assert len(pipeline.conversation) == 2


@pytest.mark.asyncio
async def test_close_closes_transport():
    transport = ScriptedTransport([])
    await AnalysisPipeline(transport).close()
    assert transport.closed


@pytest.mark.asyncio
async def test_transport_called_once_with_trimmed_text():
    """Test the collaborator contract with a mocked transport."""
    transport = Mock(spec=AnalysisTransport)
    transport.analyze = AsyncMock(return_value=make_payload("verdict"))
    pipeline = AnalysisPipeline(transport, sleep=RecordingSleep())
    observer = Mock()
    pipeline.conversation.subscribe(observer)

    await pipeline.submit(" claim ")

    transport.analyze.assert_awaited_once_with("claim")
    kinds = [call.args[0].kind for call in observer.call_args_list]
    assert kinds == ["appended", "request_started", "appended", "request_finished"]


@pytest.mark.asyncio
async def test_stale_result_keeps_previous_outcome():
    """Test that a dropped result does not replace the last committed outcome."""
    transport = GatedTransport(make_payload("first"))
    pipeline = AnalysisPipeline(transport, sleep=RecordingSleep())
    transport.release.set()
    await pipeline.submit("one")
    committed = pipeline.last_outcome

    transport.payload = make_payload("late")
    transport.release.clear()
    transport.started.clear()
    task = asyncio.create_task(pipeline.submit("two"))
    await transport.started.wait()
    pipeline.cancel()
    transport.release.set()

    assert await task is None
    assert pipeline.last_outcome is committed
    assert pipeline.last_outcome.text == "first"

"""Tests for the conversation log and request bookkeeping."""
import pytest

from truthlens.analysis import (
    AnalysisResult,
    Failure,
    RequestInFlightError,
    Source,
    Success,
)
from truthlens.conversation import (
    DEFAULT_GREETING,
    FAILURE_TEXT,
    ConversationState,
    Message,
)

SOURCE = Source(uri="https://example.org/a", title="Example")


def success(text="Analysis", sources=(SOURCE,), attempts=1) -> Success:
    return Success(result=AnalysisResult(text=text, sources=sources), attempts=attempts)


@pytest.fixture
def conversation():
    return ConversationState()


@pytest.fixture
def events(conversation):
    received = []
    conversation.subscribe(received.append)
    return received


class TestInitialState:
    """Tests for a fresh conversation."""

    def test_starts_with_greeting(self, conversation):
        (greeting,) = conversation.messages
        assert greeting.text == DEFAULT_GREETING
        assert not greeting.is_user
        assert not greeting.is_error
        assert greeting.sources == ()
        assert not conversation.in_flight

    def test_custom_greeting(self):
        assert ConversationState(greeting="Hi").messages[0].text == "Hi"


class TestAppend:
    """Tests for appending messages."""

    def test_append_order(self, conversation):
        conversation.append_user("claim")
        conversation.append_bot("reply", [SOURCE])

        texts = [m.text for m in conversation.messages]
        assert texts == [DEFAULT_GREETING, "claim", "reply"]
        assert conversation.messages[1].is_user
        assert conversation.messages[2].sources == (SOURCE,)

    def test_error_messages_carry_no_sources(self, conversation):
        message = conversation.append_bot("failed", [SOURCE], is_error=True)
        assert message.is_error
        assert message.sources == ()

    def test_messages_are_immutable(self, conversation):
        with pytest.raises(ValueError):
            conversation.messages[0].text = "changed"

    def test_snapshot_does_not_alias(self, conversation):
        snapshot = conversation.messages
        conversation.append_user("later")
        assert len(snapshot) == 1
        assert len(conversation) == 2

    def test_latest_bot_message(self, conversation):
        conversation.append_bot("first reply")
        conversation.append_user("question")
        assert conversation.latest_bot_message().text == "first reply"

    def test_role(self):
        assert Message(text="x", is_user=True).role == "user"
        assert Message(text="x").role == "assistant"


class TestReset:
    """Tests for reset()."""

    def test_reset_restores_greeting_only(self, conversation):
        for i in range(4):
            conversation.append_user(f"claim {i}")
            conversation.append_bot(f"reply {i}", [SOURCE])

        conversation.reset()

        assert len(conversation) == 1
        greeting = conversation.messages[0]
        assert greeting.text == DEFAULT_GREETING
        assert not greeting.is_user and not greeting.is_error
        assert greeting.sources == ()

    def test_reset_drops_outstanding_request(self, conversation):
        token = conversation.begin_request()
        conversation.reset()

        assert not conversation.in_flight
        assert conversation.complete_request(token, success()) is None
        assert len(conversation) == 1

    def test_reset_notifies(self, conversation, events):
        conversation.reset()
        assert [e.kind for e in events] == ["reset"]


class TestRequests:
    """Tests for request tokens and completion."""

    def test_single_request_in_flight(self, conversation):
        conversation.begin_request()
        with pytest.raises(RequestInFlightError):
            conversation.begin_request()

    def test_tokens_are_unique(self, conversation):
        first = conversation.begin_request()
        conversation.cancel_request()
        second = conversation.begin_request()
        assert first != second
        assert conversation.is_current(second)
        assert not conversation.is_current(first)

    def test_success_appends_text_and_sources(self, conversation):
        token = conversation.begin_request()

        message = conversation.complete_request(token, success("All good"))

        assert message.text == "All good"
        assert message.sources == (SOURCE,)
        assert not message.is_error
        assert conversation.messages[-1] == message
        assert not conversation.in_flight

    def test_failure_appends_error_notice(self, conversation):
        token = conversation.begin_request()

        message = conversation.complete_request(token, Failure(reason="503", attempts=5))

        assert message.is_error
        assert message.text == FAILURE_TEXT
        assert message.sources == ()

    def test_stale_token_is_ignored(self, conversation):
        token = conversation.begin_request()
        conversation.cancel_request()

        assert conversation.complete_request(token, success()) is None
        assert len(conversation) == 1

    def test_event_sequence(self, conversation, events):
        conversation.append_user("claim")
        token = conversation.begin_request()
        conversation.complete_request(token, success())

        assert [e.kind for e in events] == [
            "appended", "request_started", "appended", "request_finished",
        ]
        assert events[-1].message == conversation.messages[-1]

    def test_cancel_notifies_without_message(self, conversation, events):
        conversation.begin_request()
        conversation.cancel_request()
        assert events[-1].kind == "request_finished"
        assert events[-1].message is None

    def test_cancel_when_idle_is_noop(self, conversation, events):
        conversation.cancel_request()
        assert events == []

    def test_unsubscribe(self, conversation):
        received = []
        unsubscribe = conversation.subscribe(received.append)
        unsubscribe()
        unsubscribe()
        conversation.append_user("x")
        assert received == []

"""Explicit conversation state.

Owns the append-only message log and the single in-flight request. Every
mutation goes through the operations below, and observers are told about it
through subscribe().
"""

import logging
from collections.abc import Callable
from itertools import count

from ..analysis.errors import RequestInFlightError
from ..analysis.models import Failure, RequestOutcome, Source
from .models import DEFAULT_GREETING, FAILURE_TEXT, ConversationEvent, EventKind, Message

logger = logging.getLogger(__name__)

Subscriber = Callable[[ConversationEvent], None]


class ConversationState:
    """Ordered message log plus the in-flight request token.

    At most one request is outstanding. Each request gets a fresh identity
    token; results are committed only while their token is still the active
    one, so reset() and cancel_request() make late results harmless.
    """

    def __init__(self, greeting: str = DEFAULT_GREETING) -> None:
        self._greeting = greeting
        self._messages: list[Message] = [self._greeting_message()]
        self._tokens = count(1)
        self._active_token: int | None = None
        self._subscribers: list[Subscriber] = []

    def _greeting_message(self) -> Message:
        return Message(text=self._greeting)

    @property
    def messages(self) -> tuple[Message, ...]:
        """Snapshot of the log, oldest first."""
        return tuple(self._messages)

    @property
    def in_flight(self) -> bool:
        return self._active_token is not None

    def __len__(self) -> int:
        return len(self._messages)

    def latest_bot_message(self) -> Message | None:
        for msg in reversed(self._messages):
            if not msg.is_user:
                return msg
        return None

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register an observer. Returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, kind: EventKind, message: Message | None = None) -> None:
        event = ConversationEvent(kind=kind, message=message)
        for callback in list(self._subscribers):
            callback(event)

    def _append(self, message: Message) -> Message:
        self._messages.append(message)
        self._notify("appended", message)
        return message

    def append_user(self, text: str) -> Message:
        """Append a user submission."""
        return self._append(Message(text=text, is_user=True))

    def append_bot(
        self,
        text: str,
        sources: tuple[Source, ...] | list[Source] = (),
        is_error: bool = False,
    ) -> Message:
        """Append a bot reply or an error notice. Error notices carry no sources."""
        if is_error:
            sources = ()
        return self._append(Message(text=text, sources=tuple(sources), is_error=is_error))

    def reset(self) -> None:
        """Reinitialize to the greeting and drop any outstanding request."""
        if self._active_token is not None:
            logger.info("Reset discarded in-flight request %d", self._active_token)
        self._active_token = None
        self._messages = [self._greeting_message()]
        self._notify("reset")

    def begin_request(self) -> int:
        """Mark a request as in flight and return its identity token.

        Raises:
            RequestInFlightError: If another request is still outstanding
        """
        if self._active_token is not None:
            raise RequestInFlightError("A request is already being processed")
        self._active_token = next(self._tokens)
        self._notify("request_started")
        return self._active_token

    def is_current(self, token: int) -> bool:
        return token == self._active_token

    def cancel_request(self) -> None:
        """Abandon the active request; its result will be ignored."""
        if self._active_token is None:
            return
        logger.info("Request %d cancelled", self._active_token)
        self._active_token = None
        self._notify("request_finished")

    def complete_request(self, token: int, outcome: RequestOutcome) -> Message | None:
        """Commit a terminal outcome for the given request.

        Returns:
            The appended bot message, or None if the token is stale
        """
        if not self.is_current(token):
            logger.info("Dropping stale result for request %d", token)
            return None

        self._active_token = None
        if isinstance(outcome, Failure):
            message = self.append_bot(FAILURE_TEXT, is_error=True)
        else:
            message = self.append_bot(outcome.text, outcome.sources)
        self._notify("request_finished", message)
        return message

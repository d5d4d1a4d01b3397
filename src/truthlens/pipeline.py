"""Request orchestration.

user input -> ConversationState.append_user -> RetryController(transport +
interpreter) -> ConversationState.complete_request. Rendering (and the reveal)
happens in whoever observes the conversation.
"""

import asyncio
import logging
from collections.abc import Sequence

from .analysis.base import AnalysisTransport
from .analysis.errors import RequestInFlightError, RequestSuperseded
from .analysis.interpreter import interpret_response
from .analysis.models import AnalysisResult, RequestOutcome
from .analysis.retry import BackoffPolicy, RetryController, Sleep
from .conversation.models import Message
from .conversation.state import ConversationState

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTIONS = (
    "Scientists confirm that drinking celery juice every morning cures all chronic diseases.",
    "BREAKING: The government is secretly adding mind-control chemicals to tap water!",
    "A new study shows that people who read the news daily live 10 years longer.",
)


class AnalysisPipeline:
    """Submits text for analysis and records the outcome in the conversation.

    Only one submission is processed at a time; submit() raises
    RequestInFlightError while another request is outstanding.
    """

    def __init__(
        self,
        transport: AnalysisTransport,
        conversation: ConversationState | None = None,
        policy: BackoffPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
        suggestions: Sequence[str] = DEFAULT_SUGGESTIONS,
    ) -> None:
        self._transport = transport
        self._conversation = conversation or ConversationState()
        self._controller = RetryController(policy, sleep=sleep)
        self._suggestions = tuple(suggestions)
        self.last_outcome: RequestOutcome | None = None

    @property
    def conversation(self) -> ConversationState:
        return self._conversation

    @property
    def transport(self) -> AnalysisTransport:
        return self._transport

    @property
    def policy(self) -> BackoffPolicy:
        return self._controller.policy

    @property
    def suggestions(self) -> tuple[str, ...]:
        return self._suggestions

    async def _attempt(self, text: str) -> AnalysisResult:
        payload = await self._transport.analyze(text)
        return interpret_response(payload)

    async def submit(self, text: str) -> Message | None:
        """Analyze `text` and append the reply to the conversation.

        Returns:
            The bot message that was appended (an error-flagged one on terminal
            failure), or None if the text was blank or the request was
            superseded before it finished

        Raises:
            RequestInFlightError: If another request is still outstanding
        """
        text = text.strip()
        if not text:
            return None

        conversation = self._conversation
        if conversation.in_flight:
            raise RequestInFlightError("A request is already being processed")
        conversation.append_user(text)
        token = conversation.begin_request()
        logger.info("Request %d started (%d chars)", token, len(text))

        try:
            outcome = await self._controller.run(
                lambda: self._attempt(text),
                is_active=lambda: conversation.is_current(token),
            )
        except RequestSuperseded:
            return None
        except BaseException:
            # Cancellation or a bug: release the slot, keep the log as it is
            if conversation.is_current(token):
                conversation.cancel_request()
            raise

        # Observers read last_outcome while complete_request notifies them
        if conversation.is_current(token):
            self.last_outcome = outcome
        message = conversation.complete_request(token, outcome)
        if message is not None:
            logger.info(
                "Request %d finished: %s after %d attempt(s)",
                token, outcome.kind, outcome.attempts,
            )
        return message

    async def submit_suggestion(self, index: int) -> Message | None:
        """Submit one of the predefined quick suggestions."""
        return await self.submit(self._suggestions[index])

    def cancel(self) -> None:
        """Abandon the request in flight, if any."""
        self._conversation.cancel_request()

    async def close(self) -> None:
        await self._transport.close()

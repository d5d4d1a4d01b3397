"""Bounded retry with exponential backoff.

Hides the timing policy that makes a single-attempt transport resilient.
Attempts run strictly one after another; the caller only ever sees the
terminal outcome.
"""

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field

from .errors import AnalysisError, RequestSuperseded
from .models import AnalysisResult, Failure, RequestOutcome, Success

logger = logging.getLogger(__name__)

Operation = Callable[[], Awaitable[AnalysisResult]]
Sleep = Callable[[float], Awaitable[None]]


class BackoffPolicy(BaseModel):
    """Retry policy: attempt budget and exponential delay schedule.

    delay(k) = min(base_delay * multiplier ** k, max_delay), where k is the
    1-based index of the attempt that just failed.
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=5, ge=1, description="Total attempts per request")
    base_delay: float = Field(default=0.1, ge=0.0, description="Seconds, before scaling")
    multiplier: float = Field(default=2.0, ge=1.0, description="Growth factor per attempt")
    max_delay: float = Field(default=8.0, ge=0.0, description="Upper bound for one delay")

    def delay(self, attempt: int) -> float:
        """Seconds to wait after the given failed attempt."""
        if self.base_delay <= 0 or self.max_delay <= 0:
            return 0.0
        # Compare exponents so large attempt numbers never overflow the power
        if attempt * math.log(self.multiplier) >= math.log(self.max_delay / self.base_delay):
            return self.max_delay
        return min(self.base_delay * self.multiplier ** attempt, self.max_delay)


class RetryController:
    """Drives an operation until it succeeds or the attempt budget runs out.

    Example:
        controller = RetryController(BackoffPolicy(max_attempts=3))
        outcome = await controller.run(lambda: attempt(text))
        if isinstance(outcome, Success):
            ...
    """

    def __init__(self, policy: BackoffPolicy | None = None, sleep: Sleep = asyncio.sleep) -> None:
        self._policy = policy or BackoffPolicy()
        self._sleep = sleep

    @property
    def policy(self) -> BackoffPolicy:
        return self._policy

    async def run(
        self,
        operation: Operation,
        is_active: Callable[[], bool] | None = None,
    ) -> RequestOutcome:
        """Run the operation with retries.

        Args:
            operation: Zero-argument coroutine factory performing one attempt
            is_active: Returns False once the caller has lost interest; checked
                before each attempt and after each backoff delay

        Returns:
            Success with the first usable result, or Failure carrying the last
            error once all attempts are exhausted

        Raises:
            RequestSuperseded: If is_active() turned False; no further attempts
                are made
        """
        policy = self._policy
        last_error: AnalysisError | None = None

        for attempt in range(1, policy.max_attempts + 1):
            self._check_active(is_active, attempt)
            try:
                result = await operation()
            except AnalysisError as e:
                last_error = e
                if attempt >= policy.max_attempts:
                    break
                delay = policy.delay(attempt)
                logger.warning(
                    "Attempt %d/%d failed: %s; retrying in %.2fs",
                    attempt, policy.max_attempts, e, delay,
                )
                await self._sleep(delay)
                continue

            if attempt > 1:
                logger.info("Attempt %d/%d succeeded", attempt, policy.max_attempts)
            return Success(result=result, attempts=attempt)

        reason = str(last_error) if last_error is not None else "unknown error"
        logger.error("All %d attempt(s) failed; last error: %s", policy.max_attempts, reason)
        return Failure(reason=reason, attempts=policy.max_attempts)

    @staticmethod
    def _check_active(is_active: Callable[[], bool] | None, attempt: int) -> None:
        if is_active is not None and not is_active():
            logger.info("Request superseded before attempt %d; stopping", attempt)
            raise RequestSuperseded(f"request abandoned before attempt {attempt}")

"""Typewriter-style reveal of an already complete text.

Hides the timing of the reveal effect from the rendering layer. The scheduler
produces a lazy sequence of visible prefix lengths; the consumer decides what
to draw for each one. Only one text is revealed at a time: starting a new
reveal stops the previous sequence at its next tick.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 0.02  # Seconds between ticks
DEFAULT_STEP = 1  # Characters added per tick

Sleep = Callable[[float], Awaitable[None]]


class RevealPhase(str, Enum):
    """Lifecycle of the scheduler: Idle -> Revealing -> Complete."""

    IDLE = "idle"
    REVEALING = "revealing"
    COMPLETE = "complete"


@dataclass
class RevealState:
    """Progress of the text currently being revealed."""

    full_text: str
    visible_prefix_length: int = 0

    @property
    def visible_text(self) -> str:
        return self.full_text[:self.visible_prefix_length]

    @property
    def done(self) -> bool:
        return self.visible_prefix_length >= len(self.full_text)


def prefix_lengths(length: int, step: int = DEFAULT_STEP) -> Iterator[int]:
    """Yield growing prefix lengths, ending at exactly `length`.

    >>> list(prefix_lengths(5, step=2))
    [2, 4, 5]
    """
    if step < 1:
        raise ValueError("step must be at least 1")
    visible = 0
    while visible < length:
        visible = min(visible + step, length)
        yield visible


class RevealScheduler:
    """Drives the reveal of one text at a time.

    Example:
        scheduler = RevealScheduler(interval=0.02)
        async for visible in scheduler.reveal(answer):
            widget.update(answer[:visible])
        # scheduler.phase is COMPLETE unless another reveal took over
    """

    def __init__(
        self,
        interval: float = DEFAULT_INTERVAL,
        step: int = DEFAULT_STEP,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if step < 1:
            raise ValueError("step must be at least 1")
        self._interval = interval
        self._step = step
        self._sleep = sleep
        self._generation = 0
        self._state: RevealState | None = None
        self._phase = RevealPhase.IDLE
        self._complete_callbacks: list[Callable[[str], None]] = []

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def phase(self) -> RevealPhase:
        return self._phase

    @property
    def state(self) -> RevealState | None:
        return self._state

    @property
    def visible_text(self) -> str:
        return self._state.visible_text if self._state is not None else ""

    def on_complete(self, callback: Callable[[str], None]) -> None:
        """Register a callback fired with the full text when a reveal completes."""
        self._complete_callbacks.append(callback)

    def reveal(self, text: str) -> AsyncIterator[int]:
        """Start revealing `text`, cancelling any reveal in progress.

        The state is reset to zero visible characters immediately; the returned
        iterator yields the new visible length after every tick.
        """
        if self._phase is RevealPhase.REVEALING:
            logger.debug("Reveal superseded at %d/%d chars",
                         self._state.visible_prefix_length, len(self._state.full_text))
        self._generation += 1
        self._state = RevealState(full_text=text)
        self._phase = RevealPhase.REVEALING
        return self._ticks(self._generation, self._state)

    def cancel(self) -> None:
        """Stop the current reveal without completing it."""
        self._generation += 1
        self._state = None
        self._phase = RevealPhase.IDLE

    async def play(self, text: str, on_tick: Callable[[int], None]) -> bool:
        """Reveal `text`, calling on_tick for every new length.

        Returns:
            True if the reveal completed, False if another one took over
        """
        ticks = self.reveal(text)
        generation = self._generation
        async for visible in ticks:
            on_tick(visible)
        return generation == self._generation and self._phase is RevealPhase.COMPLETE

    async def _ticks(self, generation: int, state: RevealState) -> AsyncIterator[int]:
        for length in prefix_lengths(len(state.full_text), self._step):
            await self._sleep(self._interval)
            if generation != self._generation:
                return
            state.visible_prefix_length = length
            yield length

        if generation != self._generation:
            return
        self._phase = RevealPhase.COMPLETE
        for callback in list(self._complete_callbacks):
            callback(state.full_text)

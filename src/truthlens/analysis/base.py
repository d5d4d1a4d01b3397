from abc import ABC, abstractmethod
from typing import Any

from .models import CandidatePayload


class AnalysisTransport(ABC):
    """Abstract base class for analysis transports.

    This module hides the design decision of how the remote analysis service
    is reached. Implementations must handle:
    - Endpoint addressing and authentication
    - Request body construction (instruction template, retrieval tool flag)
    - Mapping transport failures onto NetworkError / ProtocolError

    A transport performs exactly one outbound call per invocation and never
    retries; resilience belongs to the RetryController.

    Supports async context manager protocol for proper resource cleanup:
        async with transport:
            payload = await transport.analyze(text)
    """

    @abstractmethod
    async def analyze(self, text: str) -> CandidatePayload:
        """Send one analysis request.

        Args:
            text: User supplied text to analyze

        Returns:
            CandidatePayload holding the first candidate's raw content and
            grounding metadata

        Raises:
            NetworkError: Non-2xx status or transport-level failure
            ProtocolError: Response body lacks the expected fields
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier shown in the UI (usually the model name)."""

    async def __aenter__(self) -> "AnalysisTransport":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise

"""Exception hierarchy for the analysis pipeline.

Attempt-level errors (NetworkError, ProtocolError) are absorbed by the retry
controller. Everything else describes the state of a whole request.
"""


class TruthLensError(Exception):
    """Base class for all TruthLens errors."""


class ConfigurationError(TruthLensError):
    """Required configuration (such as the API key) is missing or invalid."""


class AnalysisError(TruthLensError):
    """A single analysis attempt did not produce usable output."""


class NetworkError(AnalysisError):
    """Transport-level failure or non-2xx status from the analysis endpoint."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProtocolError(AnalysisError):
    """The endpoint answered, but the body lacks the expected fields."""


class TerminalFailure(TruthLensError):
    """Every attempt failed; no further automatic retry happens."""

    def __init__(self, reason: str, attempts: int) -> None:
        super().__init__(f"{reason} (after {attempts} attempt(s))")
        self.reason = reason
        self.attempts = attempts


class RequestSuperseded(TruthLensError):
    """The request lost its identity token; its result must not be applied."""


class RequestInFlightError(TruthLensError):
    """A new request was started while another one is still outstanding."""

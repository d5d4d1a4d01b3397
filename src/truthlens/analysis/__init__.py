from .base import AnalysisTransport
from .errors import (
    AnalysisError,
    ConfigurationError,
    NetworkError,
    ProtocolError,
    RequestInFlightError,
    RequestSuperseded,
    TerminalFailure,
    TruthLensError,
)
from .factory import create_transport
from .gemini import GeminiTransport
from .interpreter import interpret_response, resolve_grounding, search_url, sources_from
from .models import (
    AnalysisResult,
    CandidatePayload,
    Failure,
    NoGrounding,
    RequestOutcome,
    SearchQueries,
    Source,
    Success,
    WebAttributions,
)
from .retry import BackoffPolicy, RetryController

__all__ = [
    "AnalysisError",
    "AnalysisResult",
    "AnalysisTransport",
    "BackoffPolicy",
    "CandidatePayload",
    "ConfigurationError",
    "Failure",
    "GeminiTransport",
    "NetworkError",
    "NoGrounding",
    "ProtocolError",
    "RequestInFlightError",
    "RequestOutcome",
    "RequestSuperseded",
    "RetryController",
    "SearchQueries",
    "Source",
    "Success",
    "TerminalFailure",
    "TruthLensError",
    "WebAttributions",
    "create_transport",
    "interpret_response",
    "resolve_grounding",
    "search_url",
    "sources_from",
]

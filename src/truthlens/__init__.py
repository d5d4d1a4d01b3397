"""
TruthLens: a terminal assistant that screens text for misinformation.

Submitted text is analyzed by a grounded language model; the answer is revealed
progressively and the sources the model consulted are listed beneath it.

Each sub-package hides one design decision:
- analysis: how the remote service is called, retried and its replies parsed
- conversation: how the message log and the in-flight request are tracked
- reveal: how a finished answer is animated onto the screen
- ui / cli: how the user interacts with all of the above
"""

__version__ = "0.1.0"

from .analysis import (
    AnalysisResult,
    BackoffPolicy,
    Failure,
    RetryController,
    Source,
    Success,
    create_transport,
    interpret_response,
)
from .conversation import ConversationState, Message
from .pipeline import AnalysisPipeline
from .reveal import RevealPhase, RevealScheduler

__all__ = [
    "AnalysisPipeline",
    "AnalysisResult",
    "BackoffPolicy",
    "ConversationState",
    "Failure",
    "Message",
    "RetryController",
    "RevealPhase",
    "RevealScheduler",
    "Source",
    "Success",
    "create_transport",
    "interpret_response",
]

"""Data models for analysis requests and their outcomes.

Grounding metadata arrives in more than one shape depending on the service
revision. The shapes are modelled as a tagged union so that only the
interpreter ever probes raw fields.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .errors import TerminalFailure


class Source(BaseModel):
    """A cited source; both fields are required to be non-empty."""

    model_config = ConfigDict(frozen=True)

    uri: str = Field(min_length=1, description="Link to the source")
    title: str = Field(min_length=1, description="Human readable title")


class CandidatePayload(BaseModel):
    """First candidate of a successful response, before interpretation."""

    model_config = ConfigDict(frozen=True)

    content: Any = Field(default=None, description="Raw candidate content block")
    grounding_metadata: Any = Field(
        default=None,
        description="Raw grounding metadata block, if the service sent one"
    )
    raw: dict[str, Any] = Field(default_factory=dict, description="Full response body")


class AnalysisResult(BaseModel):
    """Narrative text and the sources that support it."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Generated analysis text")
    sources: tuple[Source, ...] = Field(default=(), description="Sources in payload order")


class WebAttributions(BaseModel):
    """Grounding given as a list of web pages with uri and title."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["web"] = "web"
    entries: tuple[Any, ...] = ()


class SearchQueries(BaseModel):
    """Grounding given as the search queries the model issued."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["search"] = "search"
    queries: tuple[Any, ...] = ()


class NoGrounding(BaseModel):
    """No grounding information was present."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


Grounding = Annotated[
    WebAttributions | SearchQueries | NoGrounding,
    Field(discriminator="kind"),
]


class Success(BaseModel):
    """Terminal outcome: an attempt produced a usable analysis."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    result: AnalysisResult
    attempts: int = Field(ge=1, description="Attempts used, including the successful one")

    @property
    def text(self) -> str:
        return self.result.text

    @property
    def sources(self) -> tuple[Source, ...]:
        return self.result.sources

    def raise_for_failure(self) -> AnalysisResult:
        return self.result


class Failure(BaseModel):
    """Terminal outcome: every attempt failed."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    reason: str = Field(description="Description of the last error")
    attempts: int = Field(ge=1, description="Attempts made before giving up")

    def raise_for_failure(self) -> AnalysisResult:
        """Raise TerminalFailure; lets callers treat outcomes as exceptions."""
        raise TerminalFailure(self.reason, self.attempts)


RequestOutcome = Annotated[Success | Failure, Field(discriminator="kind")]

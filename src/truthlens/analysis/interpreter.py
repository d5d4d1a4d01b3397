"""Response interpretation.

Turns a CandidatePayload into an AnalysisResult. This is the only place that
looks at raw response fields; grounding is resolved into a tagged union first
and sources are produced from that.
"""

import logging
from typing import Any
from urllib.parse import quote

from .errors import ProtocolError
from .models import (
    AnalysisResult,
    CandidatePayload,
    Grounding,
    NoGrounding,
    SearchQueries,
    Source,
    WebAttributions,
)

logger = logging.getLogger(__name__)

SEARCH_URL_TEMPLATE = "https://www.google.com/search?q={query}"

# Keys holding web attributions, oldest schema revision first
_WEB_KEYS = ("groundingAttributions", "groundingChunks")
_QUERY_KEY = "webSearchQueries"


def search_url(query: str) -> str:
    """Build the deterministic search link used for query-only grounding."""
    return SEARCH_URL_TEMPLATE.format(query=quote(query, safe=""))


def extract_text(content: Any) -> str:
    """Return the text of the first content part.

    Raises:
        ProtocolError: If the part or its text is missing or empty
    """
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not parts:
        raise ProtocolError("Invalid response structure from API: no content parts")

    first = parts[0]
    text = first.get("text") if isinstance(first, dict) else None
    if not isinstance(text, str) or not text:
        raise ProtocolError("Invalid response structure from API: empty text part")
    return text


def resolve_grounding(metadata: Any) -> Grounding:
    """Decide which grounding representation a response carries.

    Web attributions win over search queries; an empty list counts as absent.
    """
    if not isinstance(metadata, dict):
        return NoGrounding()

    for key in _WEB_KEYS:
        entries = metadata.get(key)
        if isinstance(entries, list) and entries:
            return WebAttributions(entries=tuple(entries))

    queries = metadata.get(_QUERY_KEY)
    if isinstance(queries, list) and queries:
        return SearchQueries(queries=tuple(queries))

    return NoGrounding()


def _web_source(entry: Any) -> Source | None:
    web = entry.get("web") if isinstance(entry, dict) else None
    if not isinstance(web, dict):
        return None
    uri, title = web.get("uri"), web.get("title")
    if not isinstance(uri, str) or not isinstance(title, str) or not uri or not title:
        return None
    return Source(uri=uri, title=title)


def sources_from(grounding: Grounding) -> tuple[Source, ...]:
    """Normalize a grounding representation into an ordered source list."""
    if isinstance(grounding, WebAttributions):
        sources = [_web_source(entry) for entry in grounding.entries]
        kept = tuple(s for s in sources if s is not None)
        dropped = len(sources) - len(kept)
        if dropped:
            logger.debug("Dropped %d incomplete web attribution(s)", dropped)
        return kept

    if isinstance(grounding, SearchQueries):
        return tuple(
            Source(uri=search_url(query), title=query)
            for query in grounding.queries
            if isinstance(query, str) and query.strip()
        )

    return ()


def interpret_response(payload: CandidatePayload) -> AnalysisResult:
    """Extract generated text and sources from a successful response.

    Args:
        payload: First candidate as returned by a transport

    Returns:
        AnalysisResult with the narrative and sources in payload order

    Raises:
        ProtocolError: If the candidate carries no text
    """
    text = extract_text(payload.content)
    grounding = resolve_grounding(payload.grounding_metadata)
    sources = sources_from(grounding)
    logger.debug(
        "Interpreted response: %d chars, grounding=%s, %d source(s)",
        len(text), grounding.kind, len(sources),
    )
    return AnalysisResult(text=text, sources=sources)

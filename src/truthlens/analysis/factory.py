from typing import Any

from .base import AnalysisTransport
from .gemini import GeminiTransport


def create_transport(provider: str, **config: Any) -> AnalysisTransport:
    """Create an analysis transport instance.

    This factory function hides the instantiation logic for different services.

    Args:
        provider: Transport type (currently only 'gemini')
        **config: Transport-specific configuration
            For Gemini:
                - api_key: str (required)
                - model: str (default: 'gemini-2.5-flash')
                - endpoint_url: str | None
                - timeout: float (default: 60.0)

    Returns:
        Initialized transport instance

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> transport = create_transport(
        ...     "gemini",
        ...     api_key="...",
        ...     model="gemini-2.5-flash"
        ... )
    """
    provider_lower = provider.lower()

    if provider_lower in ("gemini", "google"):
        if "api_key" not in config:
            raise TypeError("Gemini transport requires 'api_key' in config")
        return GeminiTransport(**config)

    raise ValueError(
        f"Unsupported provider: {provider}. "
        f"Supported providers: 'gemini'"
    )

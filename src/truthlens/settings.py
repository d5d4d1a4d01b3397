"""Runtime configuration.

Centralizes how settings are read from the environment (optionally seeded from
a .env file by the CLI). Everything else receives a Settings instance.
"""

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

from .analysis.errors import ConfigurationError
from .analysis.gemini import DEFAULT_MODEL
from .analysis.retry import BackoffPolicy

# Environment variable -> Settings field
_ENV_FIELDS = {
    "GEMINI_API_KEY": "api_key",
    "GEMINI_MODEL": "model",
    "TRUTHLENS_ENDPOINT_URL": "endpoint_url",
    "TRUTHLENS_TIMEOUT": "timeout",
    "TRUTHLENS_MAX_ATTEMPTS": "max_attempts",
    "TRUTHLENS_BASE_DELAY": "base_delay",
    "TRUTHLENS_BACKOFF_MULTIPLIER": "multiplier",
    "TRUTHLENS_MAX_DELAY": "max_delay",
    "TRUTHLENS_REVEAL_INTERVAL": "reveal_interval",
    "TRUTHLENS_LOG_LEVEL": "log_level",
}


class Settings(BaseModel):
    """Validated settings for a TruthLens session."""

    model_config = ConfigDict(frozen=True)

    api_key: str | None = Field(default=None, repr=False, description="Gemini API key")
    model: str = Field(default=DEFAULT_MODEL, min_length=1)
    endpoint_url: str | None = Field(default=None, description="Overrides the model endpoint")
    timeout: float = Field(default=60.0, gt=0)
    max_attempts: int = Field(default=5, ge=1)
    base_delay: float = Field(default=0.1, ge=0)
    multiplier: float = Field(default=2.0, ge=1)
    max_delay: float = Field(default=8.0, ge=0)
    reveal_interval: float = Field(default=0.02, ge=0)
    log_level: str = Field(default="WARNING")

    @property
    def backoff_policy(self) -> BackoffPolicy:
        return BackoffPolicy(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            multiplier=self.multiplier,
            max_delay=self.max_delay,
        )

    def transport_config(self) -> dict:
        """Keyword arguments for create_transport().

        Raises:
            ConfigurationError: If no API key is configured
        """
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY not set in environment")
        return {
            "api_key": self.api_key,
            "model": self.model,
            "endpoint_url": self.endpoint_url,
            "timeout": self.timeout,
        }


def load_settings(environ: Mapping[str, str] | None = None, **overrides) -> Settings:
    """Build Settings from environment variables.

    Blank variables are treated as unset. Keyword overrides (e.g. from CLI
    options) take precedence when not None.

    Raises:
        pydantic.ValidationError: If a value cannot be parsed or is out of range
    """
    env = os.environ if environ is None else environ
    values = {}
    for var, field in _ENV_FIELDS.items():
        raw = env.get(var)
        if raw is not None and raw.strip():
            values[field] = raw.strip()
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)

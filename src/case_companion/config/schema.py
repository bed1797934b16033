"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces values from
the environment (``PERPLEXITY_*`` variables, optionally loaded from a ``.env``
file) and programmatic overrides into typed settings with defaults.
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from case_companion.constants import DEFAULT_MODEL, NETWORK_TIMEOUT, PERPLEXITY_API_URL


class CompanionSettings(BaseSettings):
    """Pydantic settings schema for the completion endpoint.

    A missing ``api_key`` is valid here: the absence is reported per call as a
    configuration-missing error instead of failing at startup.
    """

    model_config = SettingsConfigDict(
        env_prefix="PERPLEXITY_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str | None = Field(
        default=None,
        description="Bearer credential for the completion endpoint",
    )

    api_url: str = Field(
        default=PERPLEXITY_API_URL,
        description="Chat-completions endpoint URL",
        min_length=1,
    )

    model: str = Field(
        default=DEFAULT_MODEL,
        description="Model identifier sent with every request",
        min_length=1,
    )

    timeout_seconds: float = Field(
        default=NETWORK_TIMEOUT,
        description="Request timeout in seconds",
        gt=0,
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def blank_key_is_missing(cls, v: Any) -> Any:
        """Treat an empty or whitespace-only key the same as an absent one."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("api_url")
    @classmethod
    def require_http_scheme(cls, v: str) -> str:
        """Reject URLs the HTTP client could never reach."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"api_url must be an http(s) URL, got {v!r}")
        return v

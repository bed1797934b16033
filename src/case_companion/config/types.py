"""Immutable configuration handed to the completion client."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FrozenConfig:
    """Resolved configuration; any attempt to modify it raises.

    The API key never appears in ``str``/``repr`` output so configs can be
    logged safely.
    """

    api_key: str | None
    api_url: str
    model: str
    timeout_seconds: float

    def __str__(self) -> str:
        """String representation with redacted API key for safe logging."""
        api_key_display = "[REDACTED]" if self.api_key else None
        return (
            f"FrozenConfig(api_key={api_key_display!r}, api_url={self.api_url!r}, "
            f"model={self.model!r}, timeout_seconds={self.timeout_seconds!r})"
        )

    def __repr__(self) -> str:
        """Representation with redacted API key for safe debugging."""
        return self.__str__()

    @property
    def has_credential(self) -> bool:
        """True when an API key is present."""
        return bool(self.api_key)

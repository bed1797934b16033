"""Public entry point for configuration resolution.

Precedence: programmatic overrides > environment (and optional ``.env`` file)
> defaults.
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from case_companion.exceptions import ConfigurationError

from .schema import CompanionSettings
from .types import FrozenConfig

log = logging.getLogger(__name__)

_KNOWN_FIELDS = frozenset(CompanionSettings.model_fields)


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    env_file: str | Path | None = None,
) -> FrozenConfig:
    """Resolve configuration from overrides, environment and defaults.

    Args:
        programmatic: Overrides with the highest precedence. Unknown keys are
            ignored with a warning.
        env_file: Optional ``.env`` file read before the process environment
            is consulted. Process variables still win over file values.

    Returns:
        FrozenConfig ready to build a completion client.

    Raises:
        ConfigurationError: If the env file is missing or a value fails
            validation.

    Example:
        config = resolve_config({"model": "sonar"})
    """
    overrides = dict(programmatic or {})
    unknown = sorted(set(overrides) - _KNOWN_FIELDS)
    if unknown:
        log.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))
        for key in unknown:
            overrides.pop(key)

    if env_file is not None and not Path(env_file).is_file():
        raise ConfigurationError(
            f"Environment file '{env_file}' not found. Check the path or omit env_file."
        )

    try:
        settings = CompanionSettings(_env_file=env_file, **overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    config = FrozenConfig(
        api_key=settings.api_key,
        api_url=settings.api_url,
        model=settings.model,
        timeout_seconds=settings.timeout_seconds,
    )
    log.debug("Resolved configuration: %s", config)
    return config

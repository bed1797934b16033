"""Configuration management for Case Companion.

Settings are resolved once into an immutable ``FrozenConfig`` and injected into
the completion client; nothing reads credentials from the environment at call
time.
"""

from .api import resolve_config
from .schema import CompanionSettings
from .types import FrozenConfig

__all__ = [
    "CompanionSettings",
    "FrozenConfig",
    "resolve_config",
]

"""Result shapes returned by the flows.

Flows never raise for upstream problems. Each shape carries the classified
error (if any) next to values that are always safe to display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import html
from typing import Any

from case_companion.constants import NOT_SPECIFIED
from case_companion.core.types import ProviderMetadata
from case_companion.exceptions import ExtractionError
from case_companion.response import CaseStageCost, split_list_items


def _error_dict(error: ExtractionError | None) -> dict[str, Any] | None:
    if error is None:
        return None
    out: dict[str, Any] = {"kind": error.kind.value, "message": error.message}
    status_code = getattr(error, "status_code", None)
    if status_code is not None:
        out["status_code"] = status_code
    field_errors = getattr(error, "field_errors", None)
    if field_errors:
        out["field_errors"] = list(field_errors)
    return out


@dataclass(frozen=True)
class FlowResult:
    """Fields common to every flow result."""

    metadata: ProviderMetadata = field(default_factory=ProviderMetadata, kw_only=True)
    error: ExtractionError | None = field(default=None, kw_only=True)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view of the result."""
        return self._common()

    def _common(self) -> dict[str, Any]:
        return {**self.metadata.to_dict(), "error": _error_dict(self.error)}


@dataclass(frozen=True)
class CaseAnalysis(FlowResult):
    """Cost, duration, outcome odds and point lists for a case."""

    estimated_cost: str = NOT_SPECIFIED
    expected_duration: str = NOT_SPECIFIED
    win_probability: float = 0.0
    loss_probability: float = 0.0
    strong_points: str = NOT_SPECIFIED
    weak_points: str = NOT_SPECIFIED

    def to_dict(self) -> dict[str, Any]:
        return {
            "estimated_cost": self.estimated_cost,
            "expected_duration": self.expected_duration,
            "win_probability": self.win_probability,
            "loss_probability": self.loss_probability,
            "strong_points": self.strong_points,
            "weak_points": self.weak_points,
            **self._common(),
        }


@dataclass(frozen=True)
class PointsSummary(FlowResult):
    strong_points: str = NOT_SPECIFIED
    weak_points: str = NOT_SPECIFIED

    @property
    def strong_items(self) -> list[str]:
        return split_list_items(self.strong_points)

    @property
    def weak_items(self) -> list[str]:
        return split_list_items(self.weak_points)

    def to_dict(self) -> dict[str, Any]:
        return {
            "strong_points": self.strong_points,
            "weak_points": self.weak_points,
            **self._common(),
        }


@dataclass(frozen=True)
class StrategySnapshot(FlowResult):
    opening_statement_hook: str = NOT_SPECIFIED
    top_strengths: str = NOT_SPECIFIED
    top_weaknesses: str = NOT_SPECIFIED

    def to_dict(self) -> dict[str, Any]:
        return {
            "opening_statement_hook": self.opening_statement_hook,
            "top_strengths": self.top_strengths,
            "top_weaknesses": self.top_weaknesses,
            **self._common(),
        }


@dataclass(frozen=True)
class PresentationOutline(FlowResult):
    """Slide titles and bullets as returned by the model, unparsed."""

    outline: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"outline": self.outline, **self._common()}


@dataclass(frozen=True)
class CostRoadmap(FlowResult):
    """Ordered stage costs, or an empty tuple plus a user-facing notice."""

    stages: tuple[CaseStageCost, ...] = ()
    notice: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "stages": [stage.to_dict() for stage in self.stages],
            "notice": self.notice,
            **self._common(),
        }


@dataclass(frozen=True)
class ChatReply(FlowResult):
    """A conversational reply; ``reply`` is always displayable."""

    reply: str = ""

    @property
    def reply_html(self) -> str:
        """HTML-escaped reply with line breaks rendered as ``<br>``."""
        return html.escape(self.reply).replace("\r\n", "\n").replace("\n", "<br>")

    def to_dict(self) -> dict[str, Any]:
        return {"reply": self.reply, **self._common()}

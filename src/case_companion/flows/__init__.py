"""Caller-facing flows. Each returns a typed result and never raises for
upstream failures."""

from .analysis import (
    generate_case_analysis,
    generate_points_summary,
    generate_presentation_outline,
    generate_strategy_snapshot,
)
from .chat import (
    CHATBOT_FALLBACK,
    DEVILS_ADVOCATE_FALLBACK,
    generate_chatbot_reply,
    generate_devils_advocate_reply,
)
from .roadmap import generate_cost_roadmap
from .types import (
    CaseAnalysis,
    ChatReply,
    CostRoadmap,
    FlowResult,
    PointsSummary,
    PresentationOutline,
    StrategySnapshot,
)

__all__ = [
    "CHATBOT_FALLBACK",
    "DEVILS_ADVOCATE_FALLBACK",
    "CaseAnalysis",
    "ChatReply",
    "CostRoadmap",
    "FlowResult",
    "PointsSummary",
    "PresentationOutline",
    "StrategySnapshot",
    "generate_case_analysis",
    "generate_chatbot_reply",
    "generate_cost_roadmap",
    "generate_devils_advocate_reply",
    "generate_points_summary",
    "generate_presentation_outline",
    "generate_strategy_snapshot",
]

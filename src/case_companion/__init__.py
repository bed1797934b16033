"""Prompt assembly and structured extraction for AI-assisted legal case work."""

import importlib.metadata
import logging

from case_companion.client import CompletionClient
from case_companion.companion import CaseCompanion, create_companion
from case_companion.config import FrozenConfig, resolve_config
from case_companion.core.types import (
    CaseContext,
    ChatTurn,
    CompletionReply,
    DocumentReference,
    Failure,
    InlineDocument,
    PromptMessage,
    ProviderMetadata,
    Result,
    Success,
)
from case_companion.exceptions import (
    CaseCompanionError,
    ConfigurationError,
    ConfigurationMissingError,
    ErrorKind,
    ExtractionError,
    MalformedJSONError,
    NonSuccessStatusError,
    SchemaViolationError,
    TransportFailureError,
)
from case_companion.flows import (
    CaseAnalysis,
    ChatReply,
    CostRoadmap,
    PointsSummary,
    PresentationOutline,
    StrategySnapshot,
    generate_case_analysis,
    generate_chatbot_reply,
    generate_cost_roadmap,
    generate_devils_advocate_reply,
    generate_points_summary,
    generate_presentation_outline,
    generate_strategy_snapshot,
)
from case_companion.prompts import PromptProfile, build_messages
from case_companion.response import (
    CaseStageCost,
    FieldSet,
    HeaderSpec,
    HeaderTemplate,
    ListSections,
    ValidatedArray,
    parse_header_block,
    parse_stage_array,
    split_list_items,
)
from case_companion.telemetry import TelemetryContext, TelemetryReporter

# Version handling
try:
    __version__ = importlib.metadata.version("case-companion")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Set up a null handler for the library's root logger.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [  # noqa: RUF022
    # Facade
    "CaseCompanion",
    "create_companion",
    "CompletionClient",
    # Configuration
    "FrozenConfig",
    "resolve_config",
    # Telemetry (extension points)
    "TelemetryContext",
    "TelemetryReporter",
    # Core types
    "CaseContext",
    "ChatTurn",
    "CompletionReply",
    "DocumentReference",
    "InlineDocument",
    "PromptMessage",
    "ProviderMetadata",
    "Result",
    "Success",
    "Failure",
    # Prompt assembly
    "PromptProfile",
    "build_messages",
    # Extraction
    "CaseStageCost",
    "FieldSet",
    "HeaderSpec",
    "HeaderTemplate",
    "ListSections",
    "ValidatedArray",
    "parse_header_block",
    "parse_stage_array",
    "split_list_items",
    # Flows
    "CaseAnalysis",
    "ChatReply",
    "CostRoadmap",
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
    # Exceptions
    "CaseCompanionError",
    "ConfigurationError",
    "ErrorKind",
    "ExtractionError",
    "ConfigurationMissingError",
    "TransportFailureError",
    "NonSuccessStatusError",
    "MalformedJSONError",
    "SchemaViolationError",
]

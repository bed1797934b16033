"""Analysis flows: case analysis, points summary, strategy snapshot, outline."""

from __future__ import annotations

from case_companion.client import CompletionClient
from case_companion.core.types import CaseContext, Failure

from . import profiles
from .base import parse_block, request_completion
from .types import CaseAnalysis, PointsSummary, PresentationOutline, StrategySnapshot


async def generate_case_analysis(
    case: CaseContext, client: CompletionClient
) -> CaseAnalysis:
    """Estimate cost, duration and outcome odds, and list strong and weak points.

    Unresolved fields hold ``"Not specified"`` (text) or ``0.0`` (percentages);
    a failed call additionally sets ``error``.
    """
    result = await request_completion(profiles.CASE_ANALYSIS, case, client)
    if isinstance(result, Failure):
        return CaseAnalysis(error=result.error)

    block = parse_block(profiles.CASE_ANALYSIS_TEMPLATE, result.value)
    fields, sections = block.fields, block.sections
    return CaseAnalysis(
        estimated_cost=fields.text("estimated_cost"),
        expected_duration=fields.text("expected_duration"),
        win_probability=fields.number("win_probability"),
        loss_probability=fields.number("loss_probability"),
        strong_points=sections.get("strong_points"),
        weak_points=sections.get("weak_points"),
        metadata=result.value.metadata,
    )


async def generate_points_summary(
    case: CaseContext, client: CompletionClient
) -> PointsSummary:
    """Summarize strong and weak points as bulleted lists."""
    result = await request_completion(profiles.POINTS_SUMMARY, case, client)
    if isinstance(result, Failure):
        return PointsSummary(error=result.error)

    sections = parse_block(profiles.POINTS_SUMMARY_TEMPLATE, result.value).sections
    return PointsSummary(
        strong_points=sections.get("strong_points"),
        weak_points=sections.get("weak_points"),
        metadata=result.value.metadata,
    )


async def generate_strategy_snapshot(
    case: CaseContext, client: CompletionClient
) -> StrategySnapshot:
    result = await request_completion(profiles.STRATEGY_SNAPSHOT, case, client)
    if isinstance(result, Failure):
        return StrategySnapshot(error=result.error)

    block = parse_block(profiles.STRATEGY_SNAPSHOT_TEMPLATE, result.value)
    return StrategySnapshot(
        opening_statement_hook=block.fields.text("opening_statement_hook"),
        top_strengths=block.sections.get("top_strengths"),
        top_weaknesses=block.sections.get("top_weaknesses"),
        metadata=result.value.metadata,
    )


async def generate_presentation_outline(
    case: CaseContext, client: CompletionClient
) -> PresentationOutline:
    """Draft slide titles and bullets; the reply text is returned as is."""
    result = await request_completion(profiles.PRESENTATION_OUTLINE, case, client)
    if isinstance(result, Failure):
        return PresentationOutline(error=result.error)
    return PresentationOutline(
        outline=result.value.text.strip(), metadata=result.value.metadata
    )

"""Prompt profiles and reply templates, one per flow."""

from case_companion.constants import (
    SNIPPET_BUDGET_ANALYSIS,
    SNIPPET_BUDGET_CONVERSATION,
)
from case_companion.prompts import PromptProfile
from case_companion.prompts import instructions as ins
from case_companion.response import HeaderSpec, HeaderTemplate

CASE_ANALYSIS = PromptProfile(
    name="case_analysis",
    instruction=ins.CASE_ANALYST,
    snippet_budget=SNIPPET_BUDGET_ANALYSIS,
    closing=ins.CASE_ANALYSIS_CLOSING,
)

POINTS_SUMMARY = PromptProfile(
    name="points_summary",
    instruction=ins.POINTS_REVIEWER,
    snippet_budget=SNIPPET_BUDGET_ANALYSIS,
    closing=ins.POINTS_SUMMARY_CLOSING,
)

STRATEGY_SNAPSHOT = PromptProfile(
    name="strategy_snapshot",
    instruction=ins.STRATEGIST,
    snippet_budget=SNIPPET_BUDGET_ANALYSIS,
    closing=ins.STRATEGY_SNAPSHOT_CLOSING,
)

PRESENTATION_OUTLINE = PromptProfile(
    name="presentation_outline",
    instruction=ins.PRESENTATION_WRITER,
    snippet_budget=SNIPPET_BUDGET_ANALYSIS,
    closing=ins.PRESENTATION_OUTLINE_CLOSING,
)

COST_ROADMAP = PromptProfile(
    name="cost_roadmap",
    instruction=ins.COST_PLANNER,
    snippet_budget=SNIPPET_BUDGET_CONVERSATION,
    closing=ins.COST_ROADMAP_CLOSING,
)

CHATBOT = PromptProfile(
    name="chatbot",
    instruction=ins.CHATBOT,
    snippet_budget=SNIPPET_BUDGET_CONVERSATION,
    ask_template="User asks: {ask}",
    case_details_heading="Relevant Case Details (JSON format):",
    note_missing_documents=False,
    closing=ins.CHATBOT_CLOSING,
)

DEVILS_ADVOCATE = PromptProfile(
    name="devils_advocate",
    instruction=ins.ADVERSARY,
    snippet_budget=SNIPPET_BUDGET_CONVERSATION,
    ask_template='User\'s statement/argument: "{ask}"',
    case_details_heading="Contextual Case Details (JSON format):",
    documents_heading=(
        "Contextual Uploaded Documents Overview (summaries from data URIs if text):"
    ),
    note_missing_documents=False,
    closing=ins.ADVERSARY_CLOSING,
)

# --- Reply templates ---

CASE_ANALYSIS_TEMPLATE = HeaderTemplate(
    (
        HeaderSpec("estimated_cost", "ESTIMATED COST (INR)"),
        HeaderSpec("expected_duration", "EXPECTED DURATION"),
        HeaderSpec("win_probability", "WIN PROBABILITY", "percent"),
        HeaderSpec("loss_probability", "LOSS PROBABILITY", "percent"),
        HeaderSpec("strong_points", "STRONG POINTS", "list"),
        HeaderSpec("weak_points", "WEAK POINTS", "list"),
    )
)

POINTS_SUMMARY_TEMPLATE = HeaderTemplate(
    (
        HeaderSpec("strong_points", "STRONG POINTS", "list"),
        HeaderSpec("weak_points", "WEAK POINTS", "list"),
    )
)

STRATEGY_SNAPSHOT_TEMPLATE = HeaderTemplate(
    (
        HeaderSpec("opening_statement_hook", "OPENING STATEMENT HOOK"),
        HeaderSpec("top_strengths", "TOP STRENGTHS TO EMPHASIZE", "list"),
        HeaderSpec("top_weaknesses", "TOP WEAKNESSES TO MITIGATE", "list"),
    )
)

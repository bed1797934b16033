"""Facade owning one completion client and exposing every flow."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
import logging
from typing import TYPE_CHECKING, Any

from case_companion.client import CompletionClient
from case_companion.config import FrozenConfig, resolve_config
from case_companion.core.types import CaseContext, ChatTurn
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

if TYPE_CHECKING:
    import httpx

    from case_companion.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)


class CaseCompanion:
    """Runs flows against a single, explicitly configured client.

    Example:
        companion = create_companion()
        analysis = await companion.case_analysis(CaseContext(details_json))
    """

    def __init__(self, client: CompletionClient):
        self.client = client

    def __repr__(self) -> str:
        return f"CaseCompanion(client={self.client!r})"

    async def case_analysis(self, case: CaseContext) -> CaseAnalysis:
        return await generate_case_analysis(case, self.client)

    async def points_summary(self, case: CaseContext) -> PointsSummary:
        return await generate_points_summary(case, self.client)

    async def strategy_snapshot(self, case: CaseContext) -> StrategySnapshot:
        return await generate_strategy_snapshot(case, self.client)

    async def presentation_outline(self, case: CaseContext) -> PresentationOutline:
        return await generate_presentation_outline(case, self.client)

    async def cost_roadmap(
        self, case: CaseContext, *, clock: Callable[[], int] | None = None
    ) -> CostRoadmap:
        return await generate_cost_roadmap(case, self.client, clock=clock)

    async def chat(
        self,
        case: CaseContext,
        message: str,
        *,
        history: Iterable[ChatTurn | Mapping[str, str]] = (),
    ) -> ChatReply:
        return await generate_chatbot_reply(case, message, self.client, history=history)

    async def devils_advocate(
        self,
        case: CaseContext,
        statement: str,
        *,
        history: Iterable[ChatTurn | Mapping[str, str]] = (),
    ) -> ChatReply:
        return await generate_devils_advocate_reply(
            case, statement, self.client, history=history
        )


def create_companion(
    config: FrozenConfig | dict[str, Any] | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    telemetry: TelemetryContextProtocol | None = None,
) -> CaseCompanion:
    """Create a companion with optional configuration.

    If no ``FrozenConfig`` is provided, configuration is resolved from the
    environment, with a plain dict treated as programmatic overrides.

    Args:
        config: Resolved configuration, overrides, or None.
        transport: Custom httpx transport, mainly for tests.
        telemetry: Telemetry context for request timings.

    Returns:
        A CaseCompanion bound to one CompletionClient.
    """
    # This is the only place where ambient configuration is resolved.
    final_config = config if isinstance(config, FrozenConfig) else resolve_config(config)
    if not final_config.has_credential:
        log.warning("No API key configured; every flow will report a missing configuration")
    client = CompletionClient.from_config(
        final_config, transport=transport, telemetry=telemetry
    )
    return CaseCompanion(client)

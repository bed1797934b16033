"""Cost roadmap flow."""

from __future__ import annotations

from collections.abc import Callable
import logging

from case_companion.client import CompletionClient
from case_companion.constants import ROADMAP_FAILURE_NOTICE
from case_companion.core.types import CaseContext, Failure
from case_companion.response import parse_stage_array

from . import profiles
from .base import request_completion
from .types import CostRoadmap

log = logging.getLogger(__name__)


async def generate_cost_roadmap(
    case: CaseContext,
    client: CompletionClient,
    *,
    clock: Callable[[], int] | None = None,
) -> CostRoadmap:
    """Break the case into stages with an INR cost estimate for each.

    Any failure, whether the call or the JSON, yields no stages, the user
    notice and the classified error. ``clock`` returns epoch milliseconds for
    stage ids.
    """
    result = await request_completion(profiles.COST_ROADMAP, case, client)
    if isinstance(result, Failure):
        return CostRoadmap(notice=ROADMAP_FAILURE_NOTICE, error=result.error)

    reply = result.value
    parsed = parse_stage_array(reply.text, clock=clock)
    if isinstance(parsed, Failure):
        log.warning(
            "Cost roadmap reply rejected (%s): %s",
            parsed.error.kind.value,
            parsed.error.message,
        )
        return CostRoadmap(
            notice=ROADMAP_FAILURE_NOTICE, error=parsed.error, metadata=reply.metadata
        )
    return CostRoadmap(stages=parsed.value.stages, metadata=reply.metadata)

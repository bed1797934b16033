"""JSON-array extraction for the cost roadmap reply.

The model is told to answer with a bare JSON array but often wraps it in prose
or a markdown fence. The parser locates the outermost ``[...]`` span, decodes
it, validates every element with pydantic and only then assigns ids. Any
failure is returned as a ``Failure``; nothing partial is ever produced.
"""

from __future__ import annotations

from collections.abc import Callable
import json
import logging
import re
import time

from pydantic import BaseModel, ConfigDict, Field, StrictStr, TypeAdapter, ValidationError

from case_companion.constants import MAX_TEXT_SIZE
from case_companion.core.types import Failure, Result, Success
from case_companion.exceptions import (
    ExtractionError,
    MalformedJSONError,
    SchemaViolationError,
)

from .types import CaseStageCost, ValidatedArray

log = logging.getLogger(__name__)

# Greedy on purpose: spans from the first "[" to the last "]".
_ARRAY_SPAN_RE = re.compile(r"\[[\s\S]*\]")


class StageCostDraft(BaseModel):
    """Shape each array element must have before an id is assigned.

    Extra keys are ignored; the three named fields must be JSON strings.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    stage_name: StrictStr = Field(alias="stageName")
    description: StrictStr
    estimated_cost_inr: StrictStr = Field(alias="estimatedCostINR")


_STAGE_LIST = TypeAdapter(list[StageCostDraft])


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def locate_array(text: str) -> str:
    """Return the outermost bracketed span of ``text``, or the trimmed text."""
    stripped = text.strip()
    match = _ARRAY_SPAN_RE.search(stripped)
    return match.group(0) if match else stripped


def parse_stage_array(
    text: str, *, clock: Callable[[], int] | None = None
) -> Result[ValidatedArray, ExtractionError]:
    """Decode and validate a stage-cost array.

    Args:
        text: Raw completion text.
        clock: Returns epoch milliseconds; used for stage ids. Defaults to
            the wall clock.

    Returns:
        ``Success(ValidatedArray)`` or ``Failure`` holding a
        ``MalformedJSONError`` or ``SchemaViolationError``.
    """
    if len(text) > MAX_TEXT_SIZE:
        log.warning(
            "Roadmap text of %d chars truncated to %d before parsing",
            len(text),
            MAX_TEXT_SIZE,
        )
        text = text[:MAX_TEXT_SIZE]

    candidate = locate_array(text)
    try:
        decoded = json.loads(candidate)
    except json.JSONDecodeError as e:
        log.warning("Could not decode roadmap JSON: %s. preview='%s...'", e, candidate[:100])
        return Failure(
            MalformedJSONError(f"Roadmap reply is not valid JSON: {e.msg}", raw_text=text)
        )
    except RecursionError:
        log.warning("Roadmap JSON is nested too deeply to decode")
        return Failure(
            MalformedJSONError("Roadmap reply is nested too deeply", raw_text=text)
        )

    try:
        drafts = _STAGE_LIST.validate_python(decoded)
    except ValidationError as e:
        field_errors = tuple(_describe(err) for err in e.errors())
        log.warning("Roadmap JSON failed validation: %s", "; ".join(field_errors))
        return Failure(
            SchemaViolationError(
                f"Roadmap JSON has {len(field_errors)} invalid field(s)",
                field_errors=field_errors,
                raw_text=text,
            )
        )

    millis = (clock or _epoch_millis)()
    stages = tuple(
        CaseStageCost(
            id=f"stage-{index}-{millis}",
            stage_name=draft.stage_name,
            description=draft.description,
            estimated_cost_inr=draft.estimated_cost_inr,
        )
        for index, draft in enumerate(drafts)
    )
    log.debug("Parsed %d roadmap stage(s)", len(stages))
    return Success(ValidatedArray(stages))


def _describe(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
    return f"{location}: {error.get('msg', 'invalid value')}"

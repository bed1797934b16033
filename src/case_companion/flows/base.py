"""Shared plumbing for flows: build messages, call the client, log failures."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging

from case_companion.client import CompletionClient
from case_companion.core.types import (
    CaseContext,
    ChatTurn,
    CompletionReply,
    Failure,
    Result,
)
from case_companion.exceptions import ExtractionError
from case_companion.prompts import PromptProfile, build_messages
from case_companion.response import HeaderBlock, HeaderBlockParser, HeaderTemplate

log = logging.getLogger(__name__)


async def request_completion(
    profile: PromptProfile,
    case: CaseContext,
    client: CompletionClient,
    *,
    ask: str | None = None,
    history: Iterable[ChatTurn | Mapping[str, str]] = (),
) -> Result[CompletionReply, ExtractionError]:
    """Assemble the prompt for ``profile`` and send it."""
    messages = build_messages(profile, case, ask=ask, history=history)
    log.debug("Flow '%s' sending %d message(s)", profile.name, len(messages))
    result = await client.complete(messages)
    if isinstance(result, Failure):
        log.warning(
            "Flow '%s' completion failed (%s): %s",
            profile.name,
            result.error.kind.value,
            result.error.message,
        )
    return result


def parse_block(template: HeaderTemplate, reply: CompletionReply) -> HeaderBlock:
    """Extract ``template`` from a reply, with sentinels for anything missing."""
    return HeaderBlockParser(template).parse(reply.text)

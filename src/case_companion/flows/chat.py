"""Conversational flows: the case chatbot and the Devil's Advocate."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from case_companion.client import CompletionClient
from case_companion.core.types import CaseContext, ChatTurn, Failure
from case_companion.prompts import PromptProfile

from . import profiles
from .base import request_completion
from .types import ChatReply

CHATBOT_FALLBACK = "Sorry, I couldn't generate a response at this moment."
DEVILS_ADVOCATE_FALLBACK = (
    "I'm having trouble formulating a challenge right now. "
    "Perhaps your argument is too perfect... or I'm momentarily stumped."
)


async def _converse(
    profile: PromptProfile,
    fallback: str,
    case: CaseContext,
    message: str,
    client: CompletionClient,
    history: Iterable[ChatTurn | Mapping[str, str]],
) -> ChatReply:
    result = await request_completion(profile, case, client, ask=message, history=history)
    if isinstance(result, Failure):
        return ChatReply(reply=fallback, error=result.error)
    reply = result.value
    return ChatReply(reply=reply.text.strip() or fallback, metadata=reply.metadata)


async def generate_chatbot_reply(
    case: CaseContext,
    message: str,
    client: CompletionClient,
    *,
    history: Iterable[ChatTurn | Mapping[str, str]] = (),
) -> ChatReply:
    """Answer a question about the case, using prior turns as context.

    The reply is never empty: a failed call or blank answer yields an apology.
    """
    return await _converse(
        profiles.CHATBOT, CHATBOT_FALLBACK, case, message, client, history
    )


async def generate_devils_advocate_reply(
    case: CaseContext,
    statement: str,
    client: CompletionClient,
    *,
    history: Iterable[ChatTurn | Mapping[str, str]] = (),
) -> ChatReply:
    """Challenge the user's statement the way opposing counsel would."""
    return await _converse(
        profiles.DEVILS_ADVOCATE, DEVILS_ADVOCATE_FALLBACK, case, statement, client, history
    )

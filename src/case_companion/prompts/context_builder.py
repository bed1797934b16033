"""Prompt context assembly.

Turns a ``CaseContext``, a flow's ``PromptProfile`` and an optional chat
history into the message tuple sent to the completion endpoint. This is a pure
transformation: the same inputs always yield the same messages.
"""

from __future__ import annotations

import base64
from collections.abc import Iterable, Mapping
import dataclasses
import logging

from case_companion.constants import (
    IMAGE_MIME_MARKER,
    PDF_MIME_MARKER,
    SNIPPET_BUDGET_ANALYSIS,
    TEXT_MIME_MARKERS,
    TRUNCATION_MARKER,
)
from case_companion.core.types import (
    CaseContext,
    ChatTurn,
    DocumentRef,
    DocumentReference,
    PromptMessage,
)

log = logging.getLogger(__name__)

# --- Digest lines ---

FORMAT_ERROR_LINE = "Document (format error: no comma in data URI)"
DECODE_ERROR_LINE = "Document (error processing data URI)"
PDF_LINE = "PDF Document (content not directly included, but note its presence)."
IMAGE_LINE = "Image Document (visual content, not processed as text)."
UNPROCESSABLE_LINE = "Document (non-text or error processing)."
NO_DOCUMENTS_LINE = "No documents uploaded."

DEFAULT_DOCUMENTS_HEADING = (
    "Uploaded Documents Overview (content from data URIs, if text-based):"
)
DEFAULT_CASE_DETAILS_HEADING = "Case Details (JSON format):"


@dataclasses.dataclass(frozen=True, slots=True)
class PromptProfile:
    """Per-flow prompt configuration.

    Attributes:
        name: Flow name, used in log messages.
        instruction: Role instruction sent as the system message.
        snippet_budget: Max characters quoted from each text document.
        ask_template: Format string with an ``{ask}`` field framing the user's
            message; flows without a user ask leave it None.
        case_details_heading: Line introducing the case JSON payload.
        documents_heading: Line introducing the document digests.
        note_missing_documents: Emit an explicit "no documents" line when the
            context has none.
        closing: Final instruction appended to the user message.
    """

    name: str
    instruction: str
    snippet_budget: int = SNIPPET_BUDGET_ANALYSIS
    ask_template: str | None = None
    case_details_heading: str = DEFAULT_CASE_DETAILS_HEADING
    documents_heading: str = DEFAULT_DOCUMENTS_HEADING
    note_missing_documents: bool = True
    closing: str = ""

    def __post_init__(self) -> None:
        """Reject budgets that would quote nothing."""
        if self.snippet_budget <= 0:
            raise ValueError(f"snippet_budget must be positive, got {self.snippet_budget}")
        if not self.instruction.strip():
            raise ValueError("instruction cannot be empty")


def build_messages(
    profile: PromptProfile,
    case: CaseContext,
    *,
    ask: str | None = None,
    history: Iterable[ChatTurn | Mapping[str, str]] = (),
) -> tuple[PromptMessage, ...]:
    """Assemble the full message sequence for one completion call.

    The result is one system message, the compacted history, then a single
    user message carrying the ask, the case payload and the document digests.

    Args:
        profile: The calling flow's prompt profile.
        case: Case facts and document references.
        ask: The user's question or statement, if the flow has one.
        history: Prior turns, oldest first.

    Returns:
        Tuple of messages ready to serialize into the request body.
    """
    messages = [PromptMessage("system", profile.instruction)]
    messages.extend(compact_history(history))
    messages.append(PromptMessage("user", build_user_content(profile, case, ask=ask)))
    return tuple(messages)


def build_user_content(
    profile: PromptProfile, case: CaseContext, *, ask: str | None = None
) -> str:
    """Render the final user message for a flow."""
    sections: list[str] = []

    if ask is not None and profile.ask_template:
        sections.append(profile.ask_template.format(ask=ask))

    if case.has_case_details:
        sections.append(f"{profile.case_details_heading}\n{case.case_details}")

    if case.documents:
        lines = [profile.documents_heading]
        lines.extend(
            f"- {line}" for line in render_documents(case.documents, profile.snippet_budget)
        )
        sections.append("\n".join(lines))
    elif profile.note_missing_documents:
        sections.append(NO_DOCUMENTS_LINE)

    if profile.closing:
        sections.append(profile.closing)

    return "\n\n".join(sections)


def render_documents(documents: Iterable[DocumentRef], budget: int) -> list[str]:
    """Render one digest line per document, preserving order.

    A failure on one document yields an error line for that entry only.
    """
    return [render_document(doc, budget) for doc in documents]


def render_document(document: DocumentRef, budget: int) -> str:
    """Render the digest line for a single document reference.

    Args:
        document: Inline data URI or external reference.
        budget: Maximum characters of decoded text to quote.

    Returns:
        The digest text, without the leading list marker.
    """
    if isinstance(document, DocumentReference):
        return f"Document reference: {document.name}"

    parts = document.split()
    if parts is None:
        return FORMAT_ERROR_LINE
    meta, payload = parts

    if any(marker in meta for marker in TEXT_MIME_MARKERS):
        try:
            text = _decode_text_payload(payload)
        except ValueError as e:
            log.warning("Could not decode inline document (%s): %s", meta, e)
            return DECODE_ERROR_LINE
        return f"Text Document Snippet: {truncate_snippet(text, budget)}"
    if PDF_MIME_MARKER in meta:
        return PDF_LINE
    if IMAGE_MIME_MARKER in meta:
        return IMAGE_LINE
    return UNPROCESSABLE_LINE


def truncate_snippet(text: str, budget: int) -> str:
    """Cap ``text`` at ``budget`` characters, marking any truncation."""
    if len(text) <= budget:
        return text
    return f"{text[:budget]}{TRUNCATION_MARKER}"


def _decode_text_payload(payload: str) -> str:
    """Decode a base64 payload as UTF-8.

    Raises:
        ValueError: On invalid base64 or invalid UTF-8 (``binascii.Error`` and
            ``UnicodeDecodeError`` are both ``ValueError`` subclasses).
    """
    compact = "".join(payload.split())
    return base64.b64decode(compact, validate=True).decode("utf-8")


# --- History ---


def compact_history(
    history: Iterable[ChatTurn | Mapping[str, str]],
) -> tuple[PromptMessage, ...]:
    """Drop turns that would repeat the previous role.

    Turns are compared against the last kept message, starting from the
    system instruction, so a leading system turn is always dropped. A trailing
    user turn is also dropped because the new user message follows it.
    """
    kept: list[PromptMessage] = []
    last_role = "system"
    dropped = 0
    for turn in history:
        message = _coerce_turn(turn)
        if message is None:
            dropped += 1
            continue
        if message.role == last_role:
            dropped += 1
            continue
        kept.append(message)
        last_role = message.role

    if kept and kept[-1].role == "user":
        kept.pop()
        dropped += 1

    if dropped:
        log.debug("Compacted chat history: dropped %d turn(s)", dropped)
    return tuple(kept)


def _coerce_turn(turn: ChatTurn | Mapping[str, str]) -> PromptMessage | None:
    """Convert a caller-supplied turn, or return None if it is malformed."""
    if isinstance(turn, PromptMessage):
        return turn
    try:
        return PromptMessage(turn["role"], turn["content"])  # type: ignore[arg-type]
    except (KeyError, TypeError, ValueError) as e:
        log.warning("Skipping malformed chat history turn: %s", e)
        return None

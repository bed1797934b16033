"""Header-block extraction for labeled completion replies.

Flows ask the model to answer in a fixed template such as::

    WIN PROBABILITY: 72%
    STRONG POINTS:
    - ...

Models drift from the template, so this parser is tolerant: it matches labels
case-insensitively, bounds each body by the next *declared* header that
follows it, and degrades every unresolved value to a sentinel instead of
raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import logging
import re
from typing import Literal

from case_companion.constants import MAX_TEXT_SIZE, NOT_SPECIFIED

from .types import FieldSet, FieldValue, HeaderBlock, ListSections

log = logging.getLogger(__name__)

HeaderKind = Literal["text", "percent", "list"]

_NUMBER_RE = re.compile(r"[-+]?(?:\d+(?:\.\d+)?|\.\d+)")
_LIST_LINE_RE = re.compile(r"^(?:-|\d+\.)")
_ITEM_MARKER_RE = re.compile(r"^(?:[-*]|\d+\.)\s*")
_EMPHASIS_CHARS = "*_"


@dataclass(frozen=True, slots=True)
class HeaderSpec:
    """One expected header.

    Attributes:
        key: Name of the output field.
        label: Header text without its colon, e.g. ``"WIN PROBABILITY"``.
        kind: How the body is interpreted.
    """

    key: str
    label: str
    kind: HeaderKind = "text"


@dataclass(frozen=True)
class HeaderTemplate:
    """Ordered headers a flow expects in its reply.

    Order matters: a body ends at the first later-declared header found
    after it, not at whichever header happens to come next in the text.
    """

    headers: tuple[HeaderSpec, ...]

    def __post_init__(self) -> None:
        if not self.headers:
            raise ValueError("HeaderTemplate requires at least one header")
        keys = [h.key for h in self.headers]
        if len(set(keys)) != len(keys):
            raise ValueError(f"Duplicate header keys: {keys}")
        labels = [h.label.upper() for h in self.headers]
        if len(set(labels)) != len(labels):
            raise ValueError(f"Duplicate header labels: {labels}")

    def index(self, key: str) -> int:
        """Position of the header with ``key`` in declared order."""
        for i, spec in enumerate(self.headers):
            if spec.key == key:
                return i
        raise KeyError(key)


@lru_cache(maxsize=128)
def _header_pattern(label: str) -> re.Pattern[str]:
    return re.compile(re.escape(label) + r"\s*:", re.IGNORECASE)


class HeaderBlockParser:
    """Recovers fields and bulleted sections from one reply.

    Example:
        parser = HeaderBlockParser(template)
        block = parser.parse(reply_text)
        block.fields.number("win_probability")
    """

    def __init__(self, template: HeaderTemplate, *, max_text_size: int = MAX_TEXT_SIZE):
        self.template = template
        self.max_text_size = max_text_size

    def parse(self, text: str) -> HeaderBlock:
        """Extract every header in the template. Never raises."""
        if len(text) > self.max_text_size:
            log.warning(
                "Completion text of %d chars truncated to %d before parsing",
                len(text),
                self.max_text_size,
            )
            text = text[: self.max_text_size]

        fields: dict[str, FieldValue] = {}
        sections: dict[str, str] = {}
        unresolved: list[str] = []

        for spec in self.template.headers:
            body = self.body(text, spec.key)
            if spec.kind == "list":
                value = _list_lines(body)
                sections[spec.key] = value
                resolved = value != NOT_SPECIFIED
            elif spec.kind == "percent":
                resolved = body is not None and _NUMBER_RE.search(body) is not None
                fields[spec.key] = coerce_percentage(body or "")
            else:
                text_value = _clean_text(body)
                fields[spec.key] = text_value
                resolved = text_value != NOT_SPECIFIED
            if not resolved:
                unresolved.append(spec.key)

        block = HeaderBlock(
            fields=FieldSet(fields),
            sections=ListSections(sections),
            unresolved=tuple(unresolved),
        )
        if block.is_fully_unresolved and text.strip():
            log.warning(
                "Reply ignored the expected format; no headers resolved. preview='%s...'",
                text[:200],
            )
        elif unresolved:
            log.debug("Unresolved headers: %s", ", ".join(unresolved))
        return block

    def body(self, text: str, key: str) -> str | None:
        """Return the raw text between a header and its boundary.

        The header is its first occurrence. The boundary is the first
        occurrence, after the body start, of the earliest later-declared
        header that is present; otherwise the end of text.

        Returns:
            The untrimmed body, or None if the header is absent.
        """
        index = self.template.index(key)
        match = _header_pattern(self.template.headers[index].label).search(text)
        if match is None:
            return None
        start = match.end()
        end = len(text)
        for later in self.template.headers[index + 1 :]:
            boundary = _header_pattern(later.label).search(text, start)
            if boundary is not None:
                end = boundary.start()
                break
        return text[start:end]

    def extract_text(self, text: str, key: str) -> str:
        """Trimmed scalar value, or the sentinel."""
        return _clean_text(self.body(text, key))

    def extract_percent(self, text: str, key: str) -> float:
        """Numeric value with ``%`` ignored, or ``0.0``."""
        return coerce_percentage(self.body(text, key) or "")

    def extract_list(self, text: str, key: str) -> str:
        """Bullet and numbered lines joined by newlines, or the sentinel."""
        return _list_lines(self.body(text, key))


def parse_header_block(text: str, template: HeaderTemplate) -> HeaderBlock:
    """Convenience wrapper around ``HeaderBlockParser(template).parse(text)``."""
    return HeaderBlockParser(template).parse(text)


def coerce_percentage(value: str) -> float:
    """Coerce captured text like ``"72%"`` to ``72.0``.

    The first signed decimal number wins; text without one yields ``0.0`` and
    negative numbers clamp to ``0.0``.
    """
    match = _NUMBER_RE.search(value)
    if match is None:
        return 0.0
    try:
        number = float(match.group())
    except ValueError:
        return 0.0
    return max(number, 0.0)


def split_list_items(section: str) -> list[str]:
    """Split a list section into item texts with their markers removed.

    Lines without a marker are treated as continuations of the previous item.
    The sentinel yields an empty list.
    """
    if not section or section == NOT_SPECIFIED:
        return []
    items: list[str] = []
    for raw_line in section.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        marker = _ITEM_MARKER_RE.match(line)
        if marker:
            items.append(line[marker.end() :].strip())
        elif items:
            items[-1] = f"{items[-1]} {line}"
        else:
            items.append(line)
    return [item for item in items if item]


# --- Internal helpers ---


def _clean_text(body: str | None) -> str:
    if body is None:
        return NOT_SPECIFIED
    value = body.strip().strip(_EMPHASIS_CHARS).strip()
    return value or NOT_SPECIFIED


def _list_lines(body: str | None) -> str:
    if body is None:
        return NOT_SPECIFIED
    kept = [
        line.strip()
        for line in body.splitlines()
        if _LIST_LINE_RE.match(line.strip())
    ]
    return "\n".join(kept) or NOT_SPECIFIED

"""Core data types shared by prompt assembly, completion calls and extraction.

Everything here is immutable. A ``CaseContext`` is built fresh for each
request, turned into a tuple of ``PromptMessage`` objects, and the reply comes
back as a ``CompletionReply`` wrapped in a ``Result``.
"""

from __future__ import annotations

import dataclasses
import typing

# --- Minimal guard helpers ---


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


# --- Result Monad ---
# Extractors and the completion client return failures as values so callers
# can branch on them without broad try/except blocks.

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success(typing.Generic[TSuccess]):
    """A successful outcome."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure(typing.Generic[TFailure]):
    """A failed outcome, containing the error."""

    error: TFailure


Result: typing.TypeAlias = Success[TSuccess] | Failure[TFailure]

# --- Conversation ---

Role = typing.Literal["system", "user", "assistant"]
_ROLES: tuple[str, ...] = typing.get_args(Role)


@dataclasses.dataclass(frozen=True, slots=True)
class PromptMessage:
    """One message of the conversation sent to the completion endpoint."""

    role: Role
    content: str

    def __post_init__(self) -> None:
        """Validate role and content types."""
        _require(
            condition=self.role in _ROLES,
            message=f"must be one of {list(_ROLES)}, got {self.role!r}",
            field_name="role",
        )
        _require(
            condition=isinstance(self.content, str),
            message="must be str",
            field_name="content",
            exc=TypeError,
        )

    def to_wire(self) -> dict[str, str]:
        """Return the ``{role, content}`` mapping used in request bodies."""
        return {"role": self.role, "content": self.content}


# History turns have the same shape as prompt messages; the alias keeps call
# sites readable where a caller-supplied turn is meant.
ChatTurn = PromptMessage

# --- Documents ---

DATA_URI_PREFIX = "data:"


@dataclasses.dataclass(frozen=True, slots=True)
class InlineDocument:
    """A document supplied inline as a ``data:`` URI.

    The URI is kept verbatim; splitting into metadata and payload happens at
    render time so a malformed URI can still be reported in the prompt.
    """

    uri: str

    def __post_init__(self) -> None:
        """Validate the data URI prefix."""
        _require(
            condition=isinstance(self.uri, str)
            and self.uri.startswith(DATA_URI_PREFIX),
            message=f"must start with {DATA_URI_PREFIX!r}",
            field_name="uri",
        )

    @classmethod
    def from_payload(cls, mime_type: str, base64_payload: str) -> InlineDocument:
        """Build a base64 data URI from a MIME type and an encoded payload."""
        return cls(f"{DATA_URI_PREFIX}{mime_type};base64,{base64_payload}")

    def split(self) -> tuple[str, str] | None:
        """Split into ``(meta, payload)`` on the first comma, or None if absent."""
        meta, sep, payload = self.uri.partition(",")
        if not sep:
            return None
        return meta, payload


@dataclasses.dataclass(frozen=True, slots=True)
class DocumentReference:
    """An opaque name or identifier for a document stored elsewhere."""

    name: str


DocumentRef = InlineDocument | DocumentReference


def coerce_document(value: str | DocumentRef) -> DocumentRef:
    """Turn a raw string into a document reference.

    Strings starting with ``data:`` become ``InlineDocument``; anything else is
    treated as an external name.
    """
    if isinstance(value, InlineDocument | DocumentReference):
        return value
    if not isinstance(value, str):
        raise TypeError(f"document reference must be str, got {type(value).__name__}")
    if value.startswith(DATA_URI_PREFIX):
        return InlineDocument(value)
    return DocumentReference(value)


@dataclasses.dataclass(frozen=True, slots=True)
class CaseContext:
    """The facts submitted for one analysis request.

    Attributes:
        case_details: JSON-encoded case description, passed through verbatim.
        documents: Document references in caller order; duplicates are kept.
    """

    case_details: str = ""
    documents: tuple[DocumentRef, ...] = ()

    def __post_init__(self) -> None:
        """Normalize documents to a tuple of references."""
        _require(
            condition=isinstance(self.case_details, str),
            message="must be str",
            field_name="case_details",
            exc=TypeError,
        )
        # Frozen dataclass: bypass __setattr__ to store the normalized tuple.
        object.__setattr__(
            self, "documents", tuple(coerce_document(d) for d in self.documents)
        )

    @property
    def has_case_details(self) -> bool:
        """True when the payload is neither blank nor the empty JSON object."""
        stripped = self.case_details.strip()
        return stripped not in ("", "{}")


# --- Completion replies ---


@dataclasses.dataclass(frozen=True, slots=True)
class ProviderMetadata:
    """Provider side-channel data passed through untouched.

    ``citations`` and ``search_results`` are whatever the endpoint returned;
    this library never inspects their contents.
    """

    citations: tuple[typing.Any, ...] | None = None
    search_results: tuple[typing.Any, ...] | None = None

    @property
    def is_empty(self) -> bool:
        """True if the provider returned neither citations nor search results."""
        return self.citations is None and self.search_results is None

    def to_dict(self) -> dict[str, list[typing.Any] | None]:
        """Plain-dict view suitable for JSON serialization."""
        return {
            "citations": list(self.citations) if self.citations is not None else None,
            "search_results": (
                list(self.search_results) if self.search_results is not None else None
            ),
        }


@dataclasses.dataclass(frozen=True, slots=True)
class CompletionReply:
    """Text of the first completion choice plus opaque provider metadata."""

    text: str
    model: str
    metadata: ProviderMetadata = dataclasses.field(default_factory=ProviderMetadata)

"""Exceptions for prompt assembly, completion calls and response extraction.

Extraction errors are usually *returned* inside a ``Failure`` rather than
raised; the caller-facing flows fold them into their result shapes.
"""

from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    """Why a completion call or a structured extraction failed."""

    CONFIGURATION_MISSING = "configuration_missing"
    TRANSPORT_FAILURE = "transport_failure"
    NON_SUCCESS_STATUS = "non_success_status"
    MALFORMED_JSON = "malformed_json"
    SCHEMA_VIOLATION = "schema_violation"


class CaseCompanionError(Exception):
    """Base exception for case companion errors"""


class ConfigurationError(CaseCompanionError):
    """Raised when configuration values cannot be resolved or validated"""


class ExtractionError(CaseCompanionError):
    """A classified failure of the completion call or of result extraction.

    Attributes:
        message: Human-readable description, safe to log.
        raw_text: Upstream text kept for diagnostics, when there is any.
    """

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str, *, raw_text: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.raw_text = raw_text


class ConfigurationMissingError(ExtractionError):
    """No API credential was available, so no request was attempted"""

    kind = ErrorKind.CONFIGURATION_MISSING


class TransportFailureError(ExtractionError):
    """The request never produced a response (DNS, connect, timeout, reset)"""

    kind = ErrorKind.TRANSPORT_FAILURE


class NonSuccessStatusError(ExtractionError):
    """The endpoint answered with a non-2xx status."""

    kind = ErrorKind.NON_SUCCESS_STATUS

    def __init__(
        self, message: str, *, status_code: int, raw_text: str | None = None
    ) -> None:
        super().__init__(message, raw_text=raw_text)
        self.status_code = status_code


class MalformedJSONError(ExtractionError):
    """Text that should have been JSON could not be decoded"""

    kind = ErrorKind.MALFORMED_JSON


class SchemaViolationError(ExtractionError):
    """Decoded JSON did not have the expected shape.

    ``field_errors`` holds one ``"<location>: <problem>"`` entry per failing
    field so the whole batch can be reported at once.
    """

    kind = ErrorKind.SCHEMA_VIOLATION

    def __init__(
        self,
        message: str,
        *,
        field_errors: tuple[str, ...] = (),
        raw_text: str | None = None,
    ) -> None:
        super().__init__(message, raw_text=raw_text)
        self.field_errors = field_errors

"""
Failure description — structured error information for the failure track.

An ErrorCode enum plus an immutable FailureDescription carrying the message,
the optional exception that caused it, and when it happened.

Codes are grouped by who has to act on them: the caller (bad or unparseable
input) or the operator (tool and infrastructure problems).
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    """
    Structured error codes for the failure track.

    - Input errors: EMPTY_INPUT, VALIDATION_ERROR, REPORT_TOO_LARGE
    - Parse outcomes: PARSE_PRODUCED_EMPTY, MALFORMED_SUBJECT
    - Collaborator / infrastructure: TOOL_FAILURE, CONFIGURATION_ERROR,
      TECHNICAL_ERROR, UNKNOWN_ERROR
    """

    # --- Input errors ---
    EMPTY_INPUT = "EMPTY_INPUT"
    """No report text or object bytes were supplied (→ 400)."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Invalid request: unsupported encoding, unreadable input file (→ 400)."""

    REPORT_TOO_LARGE = "REPORT_TOO_LARGE"
    """Report text exceeds the configured size limit (→ 413)."""

    # --- Parse outcomes ---
    PARSE_PRODUCED_EMPTY = "PARSE_PRODUCED_EMPTY"
    """Text was present but grouping yielded no labels at all (→ 422)."""

    MALFORMED_SUBJECT = "MALFORMED_SUBJECT"
    """A subject/issuer value matched no attribute=value pair (→ 422)."""

    # --- Collaborator / infrastructure ---
    TOOL_FAILURE = "TOOL_FAILURE"
    """The external PKI tool reported failure instead of a report (→ 502)."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """System misconfiguration (→ 500)."""

    TECHNICAL_ERROR = "TECHNICAL_ERROR"
    """Unexpected exception inside an execution context (→ 500)."""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    """Unclassified failures (→ 500)."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor carrying error code, message, optional exception, and timestamp.

    >>> desc = FailureDescription(ErrorCode.MALFORMED_SUBJECT, "No attributes in 'garbage'")
    >>> desc.code
    <ErrorCode.MALFORMED_SUBJECT: 'MALFORMED_SUBJECT'>
    """

    code: ErrorCode
    message: str
    exception: Optional[BaseException] = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def full_stack_trace(self) -> str:
        """Message followed by the formatted exception chain, if any."""
        if self.exception is None:
            return self.message
        tb = "".join(
            traceback.format_exception(type(self.exception), self.exception, self.exception.__traceback__)
        )
        return f"{self.message}\n{tb}"

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

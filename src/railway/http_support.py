"""
HTTP integration — ErrorCode→HTTP status mapping and response builders.

    status = HttpStatusMapper.map_error_code(ErrorCode.MALFORMED_SUBJECT)  # → 422
    return build_fastapi_response(result.map(ParsedReport.to_dict))
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, TypeVar

from fastapi.responses import JSONResponse

from railway.failure import ErrorCode, FailureDescription
from railway.result import Result

T = TypeVar("T")


class HttpStatusMapper:
    """Maps ErrorCode enum values to HTTP status codes."""

    _CODE_TO_STATUS: dict[ErrorCode, int] = {
        ErrorCode.EMPTY_INPUT: 400,
        ErrorCode.VALIDATION_ERROR: 400,
        ErrorCode.REPORT_TOO_LARGE: 413,
        ErrorCode.PARSE_PRODUCED_EMPTY: 422,
        ErrorCode.MALFORMED_SUBJECT: 422,
        ErrorCode.TOOL_FAILURE: 502,
        ErrorCode.CONFIGURATION_ERROR: 500,
        ErrorCode.TECHNICAL_ERROR: 500,
        ErrorCode.UNKNOWN_ERROR: 500,
    }

    @classmethod
    def map_error_code(cls, code: ErrorCode) -> int:
        return cls._CODE_TO_STATUS.get(code, 500)

    @classmethod
    def map_failure(cls, failure: FailureDescription) -> int:
        return cls.map_error_code(failure.code)


@dataclass(frozen=True, slots=True)
class ErrorResponse:
    """
    Standardized error response body.

        {
            "error_code": "MALFORMED_SUBJECT",
            "message": "No attribute=value pairs in subject 'garbage text'",
            "timestamp": "2026-10-19T10:30:00+00:00"
        }
    """

    error_code: str
    message: str
    timestamp: str

    @staticmethod
    def from_failure(failure: FailureDescription) -> ErrorResponse:
        return ErrorResponse(
            error_code=failure.code.value,
            message=failure.message,
            timestamp=failure.timestamp.isoformat(),
        )

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def build_response(
    result: Result[T],
    success_status: int = 200,
) -> tuple[Any, int]:
    """
    Build a (body, status_code) tuple from a Result.

        body, status = build_response(result)
    """
    return result.either(
        on_success=lambda value: (value, success_status),
        on_failure=lambda error: (
            ErrorResponse.from_failure(error).to_dict(),
            HttpStatusMapper.map_failure(error),
        ),
    )


def build_fastapi_response(
    result: Result[T],
    success_status: int = 200,
) -> JSONResponse:
    """Build a FastAPI JSONResponse from a Result whose value is JSON-serializable."""
    body, status = build_response(result, success_status)
    return JSONResponse(content=body, status_code=status)

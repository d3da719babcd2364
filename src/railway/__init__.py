"""
Railway-Oriented Programming (ROP) helpers.

Explicit, composable error handling — parsing stages return Result, never raise.

    from railway import Result, ErrorCode

    def require_text(text: str) -> Result[str]:
        if not text.strip():
            return Result.failure(ErrorCode.EMPTY_INPUT, "No report text supplied")
        return Result.success(text)
"""

from railway.result import Result, Success, Failure
from railway.failure import ErrorCode, FailureDescription
from railway.execution import (
    ExecutionContext,
    NoOpExecutionContext,
    LoggingExecutionContext,
)
from railway.assertions import ResultAssertions

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "ExecutionContext",
    "NoOpExecutionContext",
    "LoggingExecutionContext",
    "ResultAssertions",
]

"""
Collaborator boundary — deciding whether PKI tool output is a report or an error.

The tool prints reports and error messages on the same channel. When the
caller knows the process exit status, that decides; only when it does not is
the text scanned for error wording. Either way the outcome is recorded as an
explicit ToolOutput.succeeded flag, and the parser downstream trusts that flag
instead of looking at the text itself.
"""

from __future__ import annotations

import re

import structlog
from railway import ErrorCode
from railway.result import Result

from pki_report.domain.models import ToolOutput

log = structlog.get_logger()

_NOTICES = ("unable to write 'random state'",)

_FAILURE_WORDS = re.compile(r"(error|invalid|unknown option|to be supplied)", re.IGNORECASE | re.DOTALL)
_USAGE = re.compile(r"usage:")

# Tried in order; the first that matches picks the summary out of the output.
_ERROR_LINE = re.compile(r"Error([^\n]+)")
_ERROR_CODE_STRING = re.compile(r":error:(.*):/")
_ERROR_TAIL = re.compile(r"error (.*)$", re.DOTALL)
_BEFORE_USAGE = re.compile(r"^(.*)usage:", re.DOTALL)
_UNABLE_TO = re.compile(r"unable to([^\n]+)")
_MISSING_FIELD = re.compile(r"(The .* field needed to be supplied and was missing)", re.DOTALL)
_FIRST_LINE = re.compile(r"^([^\n]+)")


def strip_notices(text: str) -> str:
    """Remove harmless notices the tool mixes into otherwise good output."""
    for notice in _NOTICES:
        text = text.replace(notice, "")
    return text


def looks_like_failure(text: str) -> bool:
    """Heuristic: does the output read like an error or a usage message?"""
    cleaned = strip_notices(text)
    return bool(_FAILURE_WORDS.search(cleaned) or _USAGE.search(cleaned))


def classify_output(text: str, exit_status: int | None = None) -> ToolOutput:
    """
    Turn raw tool output into a ToolOutput with an explicit success flag.

    A known exit status is authoritative. The text heuristic is the fallback
    for callers that only captured output.
    """
    if exit_status is not None:
        succeeded = exit_status == 0
    else:
        succeeded = not looks_like_failure(text)
    return ToolOutput(text=strip_notices(text), succeeded=succeeded)


def _last_colon_field(captured: str) -> str:
    return captured.split(":")[-1]


def summarize_failure(text: str) -> str:
    """
    Condense tool error output into one short message.

        >>> summarize_failure("unable to load certificate\\n1403:error:0906D06C:PEM routines")
        'unable to load certificate'
    """
    summary = ""
    if matched := _ERROR_LINE.search(text):
        summary = matched.group(1)
    elif matched := _ERROR_CODE_STRING.search(text):
        summary = _last_colon_field(matched.group(1))
    elif matched := _ERROR_TAIL.search(text):
        summary = _last_colon_field(matched.group(1))
    elif matched := _BEFORE_USAGE.search(text):
        summary = matched.group(1)
    elif matched := _UNABLE_TO.search(text):
        summary = "unable to" + matched.group(1)
    elif matched := _MISSING_FIELD.search(text):
        summary = matched.group(1)
    elif matched := _FIRST_LINE.search(text):
        summary = matched.group(1)

    summary = summary.strip()
    if not summary:
        return "unknown error"
    return summary[0].lower() + summary[1:]


def to_report_text(output: ToolOutput) -> Result[str]:
    """
    Pass the report text on when the tool succeeded.

    Returns Result.failure(TOOL_FAILURE) carrying the condensed error message
    otherwise.
    """
    if output.succeeded:
        return Result.success(output.text)

    message = summarize_failure(output.text)
    log.warning("tool.failed", message=message)
    return Result.failure(ErrorCode.TOOL_FAILURE, message)

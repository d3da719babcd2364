"""
Ports — Protocol-based interfaces between the parser core and its collaborators.

  Domain ← Ports (protocols) ← Adapters (implementations)

The PKI tool itself (process invocation, temporary files, argument escaping)
sits behind ReportRenderer; this project ships no implementation of it. The
text parser is the ReportParser implementation in adapters/text_parser.py.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from railway.result import Result

from pki_report.domain.models import InputForm, ParsedReport, ReportKind, ToolOutput


@runtime_checkable
class ReportRenderer(Protocol):
    """
    Port: have the PKI tool print an object as a human-readable text report.

    Given the object bytes and their declared encoding, returns the tool's
    standard output together with an explicit success signal. A failure to run
    the tool at all is reported as Result.failure(TOOL_FAILURE, ...).
    """

    def render(self, data: bytes, kind: ReportKind, inform: InputForm) -> Result[ToolOutput]: ...


@runtime_checkable
class ReportParser(Protocol):
    """
    Port: turn report text into a ParsedReport.

    Returns EMPTY_INPUT, PARSE_PRODUCED_EMPTY or MALFORMED_SUBJECT failures
    instead of a partial tree.
    """

    def parse(self, text: str, kind: ReportKind) -> Result[ParsedReport]: ...

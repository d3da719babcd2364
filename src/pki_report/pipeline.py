"""
Pipeline — PKI object bytes to ParsedReport.

Domain layer — no I/O of its own; the PKI tool is reached through the
ReportRenderer port and the text parser through the ReportParser port.

  check input (bytes present, encoding accepted for the kind)
    → renderer.render(data, kind, inform)    ToolOutput
      → parse_tool_output(output)            to_report_text, trusts output.succeeded
        → parser.parse(text, kind)           ParsedReport

Each stage returns Result[T]; the first failure short-circuits the rest.
"""

from __future__ import annotations

import structlog
from railway import ErrorCode
from railway.result import Result

from pki_report.adapters.tool_output import to_report_text
from pki_report.domain.models import InputForm, ParsedReport, ReportKind, ToolOutput
from pki_report.domain.ports import ReportParser, ReportRenderer

log = structlog.get_logger()


def _check_input(data: bytes, kind: ReportKind, inform: InputForm) -> Result[bytes]:
    """Reject empty objects and encodings the tool cannot read for this kind."""
    if not data:
        return Result.failure(ErrorCode.EMPTY_INPUT, f"No {kind.value} data supplied")
    if inform not in kind.accepted_forms:
        accepted = ", ".join(sorted(form.value for form in kind.accepted_forms))
        return Result.failure(
            ErrorCode.VALIDATION_ERROR,
            f"Input form {inform.value} is not accepted for {kind.value} (expected one of: {accepted})",
        )
    return Result.success(data)


def parse_tool_output(output: ToolOutput, kind: ReportKind, parser: ReportParser) -> Result[ParsedReport]:
    """
    Parse what the tool printed, or report its failure.

    Shared last stage of run_pipeline, the CLI and the HTTP service: TOOL_FAILURE
    when output.succeeded is false, otherwise whatever the parser returns.
    """
    return to_report_text(output).flat_map(lambda text: parser.parse(text, kind))


def run_pipeline(
    data: bytes,
    kind: ReportKind,
    inform: InputForm,
    renderer: ReportRenderer,
    parser: ReportParser,
) -> Result[ParsedReport]:
    """
    Render a PKI object as text with the external tool and parse the report.

    Returns Result[ParsedReport] on success, or the failure of the first
    stage that failed (EMPTY_INPUT, VALIDATION_ERROR, TOOL_FAILURE,
    PARSE_PRODUCED_EMPTY, MALFORMED_SUBJECT).
    """
    return (
        _check_input(data, kind, inform)
        .peek_failure(lambda err: log.info("pipeline.rejected_input", kind=kind.value, reason=err.message))
        .flat_map(lambda raw: renderer.render(raw, kind, inform))
        .flat_map(lambda output: parse_tool_output(output, kind, parser))
    )

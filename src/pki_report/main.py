"""
Command-line entry point — parse a saved text report and print it as JSON.

    openssl x509 -in cert.pem -noout -text -purpose > cert.txt; pki-report --exit-status $? cert.txt
    pki-report --kind crl crl.txt

Composition root for the CLI: loads settings, configures structlog, builds
the TextReportParser and runs it inside a LoggingExecutionContext.

Exit status: 0 on success, 1 when the report could not be parsed, 2 on a
configuration error.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, TextIO

import structlog
from railway import ErrorCode, LoggingExecutionContext
from railway.http_support import ErrorResponse
from railway.result import Result

from pki_report import __version__
from pki_report.adapters.text_parser import TextReportParser
from pki_report.adapters.tool_output import classify_output
from pki_report.config import AppSettings
from pki_report.domain.models import ParsedReport, ReportKind
from pki_report.pipeline import parse_tool_output


def configure_structlog(log_level: str = "INFO", stream: TextIO | None = None) -> None:
    """
    Configure structlog for structured, human-readable console logging.

    Logs go to `stream` (stderr by default) so that stdout stays free for
    the JSON report. Unknown level names fall back to INFO.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=True,
    )


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="pki-report",
        description="Turn a PKI tool text report (certificate, request or CRL) into JSON.",
    )
    p.add_argument("file", nargs="?", help="Report text file (default: stdin)")
    p.add_argument(
        "--kind",
        choices=[kind.value for kind in ReportKind],
        default=ReportKind.CERTIFICATE.value,
        help="What the report describes (default: certificate)",
    )
    p.add_argument(
        "--exit-status",
        type=int,
        default=None,
        metavar="N",
        help="Exit status of the tool run; when omitted, its output wording decides success",
    )
    p.add_argument("--compact", action="store_true", help="Print JSON on a single line")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def _read_report(path: str | None, stdin: TextIO) -> Result[str]:
    if path is None:
        return Result.from_computation(stdin.read, ErrorCode.VALIDATION_ERROR, "Cannot read report from stdin")
    return Result.from_computation(
        lambda: Path(path).read_text(encoding="utf-8"),
        ErrorCode.VALIDATION_ERROR,
        f"Cannot read report file {path}",
    )


def _write_json(payload: Any, compact: bool, out: TextIO) -> None:
    indent = None if compact else 2
    out.write(json.dumps(payload, indent=indent, ensure_ascii=False) + "\n")


def run(
    argv: list[str],
    settings: AppSettings,
    stdin: TextIO = sys.stdin,
    stdout: TextIO = sys.stdout,
) -> int:
    """Parse one report according to argv and write the JSON result to stdout."""
    args = parse_args(argv)
    kind = ReportKind(args.kind)
    parser = TextReportParser(nesting_unit=settings.parser.nesting_unit)
    ctx = LoggingExecutionContext(operation="ParseReport", log_level=logging.DEBUG)

    result: Result[ParsedReport] = ctx.execute(
        lambda: _read_report(args.file, stdin)
        .map(lambda text: classify_output(text, exit_status=args.exit_status))
        .flat_map(lambda output: parse_tool_output(output, kind, parser))
    )

    if result.is_success():
        _write_json(result.value().to_dict(), args.compact, stdout)
        return 0

    failure = result.error()
    structlog.get_logger().error("cli.parse_failed", kind=kind.value, error_code=failure.code.value)
    _write_json({"error": ErrorResponse.from_failure(failure).to_dict()}, args.compact, stdout)
    return 1


def main() -> None:
    """Load settings, configure logging and run the CLI."""
    try:
        settings = AppSettings()
    except Exception as e:
        print(f"FATAL: Configuration error — {e}", file=sys.stderr)  # noqa: T201
        sys.exit(2)

    configure_structlog(settings.log_level)
    sys.exit(run(sys.argv[1:], settings))


if __name__ == "__main__":
    main()

"""
FastAPI + Uvicorn ASGI application exposing the report parser over HTTP.

A caller that has run the PKI tool posts its text output (and whether the
tool succeeded); the service answers with the parsed report as JSON, or with
a structured error whose HTTP status follows railway.http_support.

Entry point: uvicorn pki_report.asgi:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from railway import ErrorCode
from railway.http_support import build_fastapi_response
from railway.result import Result

from pki_report import __version__
from pki_report.adapters.text_parser import TextReportParser
from pki_report.config import AppSettings
from pki_report.domain.models import ParsedReport, ReportKind, ToolOutput
from pki_report.main import configure_structlog
from pki_report.pipeline import parse_tool_output

# ─────────────────────── Global State ───────────────────────
# Set during startup; the parser itself is stateless and shared by all requests.

_settings: AppSettings | None = None
_parser: TextReportParser | None = None
_error_message: str | None = None
log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load settings, configure logging and build the parser on startup."""
    global _settings, _parser, _error_message

    try:
        settings = AppSettings()
    except Exception as e:
        _error_message = f"Configuration error: {e}"
        log.error("asgi.startup_error", error=_error_message)
        raise

    configure_structlog(settings.log_level)
    _settings = settings
    _parser = TextReportParser(nesting_unit=settings.parser.nesting_unit)
    log.info(
        "asgi.startup_complete",
        version=__version__,
        log_level=settings.log_level,
        nesting_unit=settings.parser.nesting_unit,
    )

    yield

    log.info("asgi.shutdown_complete")


app = FastAPI(
    title="pki-report",
    description="Structured records from PKI tool text reports",
    version=__version__,
    lifespan=lifespan,
)


class ReportRequest(BaseModel):
    """Text output of one PKI tool run plus its explicit success signal."""

    text: str = Field(description="Standard output of the tool's text rendering")
    succeeded: bool = Field(default=True, description="Whether the tool reported success")


def _check_size(text: str, limit: int) -> Result[str]:
    size = len(text.encode("utf-8"))
    if size > limit:
        return Result.failure(
            ErrorCode.REPORT_TOO_LARGE,
            f"Report is {size} bytes, the limit is {limit}",
        )
    return Result.success(text)


@app.post("/reports/{kind}")
async def parse_report(kind: ReportKind, request: ReportRequest) -> JSONResponse:
    """
    Parse one text report of the given kind (certificate, request, crl).

    Returns 200 with the report, 400/413/422 for unusable input, 502 when the
    tool reported failure and 503 before the service has started.
    """
    if _parser is None or _settings is None:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "reason": "Parser not initialized"},
        )

    parser = _parser
    result = (
        _check_size(request.text, _settings.parser.max_report_bytes)
        .map(lambda text: ToolOutput(text=text, succeeded=request.succeeded))
        .flat_map(lambda output: parse_tool_output(output, kind, parser))
        .peek_failure(
            lambda err: log.info("api.report_failed", kind=kind.value, error_code=err.code.value)
        )
    )
    return build_fastapi_response(result.map(ParsedReport.to_dict))


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness probe — 503 if startup failed or has not happened yet."""
    if _error_message:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "error": _error_message},
        )
    if _parser is None:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "reason": "parser not initialized"},
        )
    return JSONResponse(status_code=200, content={"status": "healthy"})


@app.get("/info")
async def info() -> dict[str, Any]:
    """Application metadata."""
    return {
        "name": "pki-report",
        "version": __version__,
        "kinds": [kind.value for kind in ReportKind],
        "ready": _parser is not None,
    }


def serve() -> None:
    """Run the service under Uvicorn with host and port from settings."""
    import uvicorn

    settings = AppSettings()
    uvicorn.run(
        "pki_report.asgi:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    serve()

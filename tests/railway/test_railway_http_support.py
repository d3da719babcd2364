"""Tests for HTTP integration — status mapping and response builders."""

import pytest

from railway import ErrorCode, FailureDescription, Result
from railway.http_support import ErrorResponse, HttpStatusMapper, build_fastapi_response, build_response


class TestHttpStatusMapper:
    @pytest.mark.parametrize(
        "code,expected_status",
        [
            (ErrorCode.EMPTY_INPUT, 400),
            (ErrorCode.VALIDATION_ERROR, 400),
            (ErrorCode.REPORT_TOO_LARGE, 413),
            (ErrorCode.PARSE_PRODUCED_EMPTY, 422),
            (ErrorCode.MALFORMED_SUBJECT, 422),
            (ErrorCode.TOOL_FAILURE, 502),
            (ErrorCode.CONFIGURATION_ERROR, 500),
            (ErrorCode.TECHNICAL_ERROR, 500),
            (ErrorCode.UNKNOWN_ERROR, 500),
        ],
    )
    def test_error_code_to_http_status(self, code, expected_status):
        assert HttpStatusMapper.map_error_code(code) == expected_status

    def test_every_code_is_mapped(self):
        assert set(HttpStatusMapper._CODE_TO_STATUS) == set(ErrorCode)

    def test_map_failure_description(self):
        failure = FailureDescription(ErrorCode.MALFORMED_SUBJECT, "garbage")
        assert HttpStatusMapper.map_failure(failure) == 422


class TestErrorResponse:
    def test_from_failure(self):
        failure = FailureDescription(ErrorCode.EMPTY_INPUT, "no text")
        response = ErrorResponse.from_failure(failure)
        assert response.error_code == "EMPTY_INPUT"
        assert response.message == "no text"
        assert response.timestamp == failure.timestamp.isoformat()

    def test_to_dict(self):
        d = ErrorResponse.from_failure(FailureDescription(ErrorCode.TOOL_FAILURE, "boom")).to_dict()
        assert set(d) == {"error_code", "message", "timestamp"}


class TestBuildResponse:
    def test_success_response(self):
        body, status = build_response(Result.success({"kind": "crl"}))
        assert status == 200
        assert body == {"kind": "crl"}

    def test_failure_response(self):
        body, status = build_response(Result.failure(ErrorCode.REPORT_TOO_LARGE, "too big"))
        assert status == 413
        assert body["error_code"] == "REPORT_TOO_LARGE"

    def test_fastapi_response(self):
        response = build_fastapi_response(Result.failure(ErrorCode.TOOL_FAILURE, "unable to load"))
        assert response.status_code == 502
        assert b"TOOL_FAILURE" in response.body

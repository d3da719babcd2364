"""
End-to-end BDD acceptance tests for the pki-report pipeline.

Exercises the full pipeline: fake tool renderer → tool output boundary →
real TextReportParser, over complete report fixtures captured from the PKI
tool for a certificate, a signing request and two revocation lists.

Each test follows Given/When/Then BDD structure in its docstring.

Markers: @pytest.mark.acceptance — full report fixtures, no external tool.
"""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from railway import ErrorCode
from railway.assertions import ResultAssertions
from railway.result import Result

from pki_report.adapters.text_parser import UNLABELED, TextReportParser
from pki_report.adapters.tool_output import classify_output
from pki_report.domain.models import DNAttribute, InputForm, ParsedReport, ReportKind, ToolOutput
from pki_report.pipeline import run_pipeline
from tests.conftest import fixture_text

pytestmark = pytest.mark.acceptance


# ── Fake adapters (no external tool) ─────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class FixtureRenderer:
    """Returns a captured report as if the tool had just printed it."""

    filename: str
    exit_status: int | None = 0

    def render(self, data: bytes, kind: ReportKind, inform: InputForm) -> Result[ToolOutput]:
        return Result.success(classify_output(fixture_text(self.filename), self.exit_status))


def _parse(filename: str, kind: ReportKind, inform: InputForm = InputForm.PEM) -> ParsedReport:
    result = run_pipeline(b"object", kind, inform, FixtureRenderer(filename), TextReportParser())
    return ResultAssertions.assert_success(result)


# ── Certificate ──────────────────────────────────────────────────────────────


class TestCertificateReport:
    def test_body_is_grouped_under_data(self) -> None:
        """
        GIVEN the text report of an X.509 certificate
        WHEN parsed end to end
        THEN the only top-level label is 'data' and its fields sit beneath it.
        """
        report = _parse("certificate.txt", ReportKind.CERTIFICATE)

        assert list(report.tree) == ["data"]
        assert report.first_value("data", "version") == "3 (0x2)"
        assert report.first_value("data", "serial_number") == "14 (0xe)"

    def test_outer_signature_algorithm_joins_the_body(self) -> None:
        """
        GIVEN the outer 'Signature Algorithm' printed one level up
        WHEN parsed as a certificate
        THEN it groups under 'data' next to the inner one, with the hex dump as children.
        """
        report = _parse("certificate.txt", ReportKind.CERTIFICATE)

        signature = report.lookup("data", "signature_algorithm")
        assert signature is not None
        assert signature.values == ("sha1WithRSAEncryption", "sha1WithRSAEncryption")
        assert signature.children is not None
        assert signature.children[UNLABELED].values[0].endswith("11:c2")

    def test_validity_dates(self) -> None:
        report = _parse("certificate.txt", ReportKind.CERTIFICATE)

        assert report.first_value("data", "validity", "not_before") == "Mar  1 10:00:00 2013 GMT"
        assert report.first_value("data", "validity", "not_after_") == "Mar  1 10:00:00 2014 GMT"

    def test_subject_and_issuer_are_attribute_lists(self) -> None:
        """
        GIVEN a subject with two OUs and a trailing /emailAddress
        WHEN parsed
        THEN all eight attributes come back in order, and the issuer has four.
        """
        report = _parse("certificate.txt", ReportKind.CERTIFICATE)

        subject = report.first_value("data", "subject")
        assert isinstance(subject, tuple)
        assert [a.name for a in subject] == ["C", "ST", "L", "O", "OU", "OU", "CN", "emailAddress"]
        assert subject[-1] == DNAttribute("emailAddress", "my@email.com")

        issuer = report.first_value("data", "issuer")
        assert isinstance(issuer, tuple)
        assert issuer[-1] == DNAttribute("CN", "My Company Root CA")

    def test_public_key_details(self) -> None:
        report = _parse("certificate.txt", ReportKind.CERTIFICATE)

        algorithm = report.lookup("data", "subject_public_key_info", "public_key_algorithm")
        assert algorithm is not None
        assert algorithm.values == ("rsaEncryption",)
        assert report.first_value(
            "data", "subject_public_key_info", "public_key_algorithm", "public-key"
        ) == "(1024 bit)"
        assert report.first_value(
            "data", "subject_public_key_info", "public_key_algorithm", "exponent"
        ) == "65537 (0x10001)"
        modulus = report.first_value(
            "data", "subject_public_key_info", "public_key_algorithm", "modulus", UNLABELED
        )
        assert isinstance(modulus, str)
        assert modulus.splitlines()[-1] == "a1:5f"

    def test_extensions(self) -> None:
        report = _parse("certificate.txt", ReportKind.CERTIFICATE)

        assert report.first_value("data", "x509v3_extensions", "x509v3_key_usage") == "critical"
        assert report.first_value(
            "data", "x509v3_extensions", "x509v3_key_usage", UNLABELED
        ) == "Digital Signature, Non Repudiation, Key Encipherment"
        assert report.first_value(
            "data", "x509v3_extensions", "x509v3_basic_constraints", UNLABELED
        ) == "CA:FALSE"

    def test_header_only_buckets_are_dropped(self) -> None:
        report = _parse("certificate.txt", ReportKind.CERTIFICATE)

        assert report.lookup(UNLABELED) is None
        assert report.lookup("data", UNLABELED) is None
        assert report.lookup("data", "x509v3_extensions", UNLABELED) is None

    def test_purposes(self) -> None:
        """
        GIVEN sixteen 'Purpose : Yes|No' lines after the certificate body
        WHEN parsed
        THEN each becomes a boolean flag under its normalized name.
        """
        report = _parse("certificate.txt", ReportKind.CERTIFICATE)

        assert report.purposes is not None
        assert len(report.purposes) == 16
        enabled = {name for name, flag in report.purposes.items() if flag}
        assert enabled == {
            "ssl_client",
            "s/mime_signing",
            "s/mime_encryption",
            "any_purpose",
            "any_purpose_ca",
            "ocsp_helper",
        }

    def test_der_input_is_accepted(self) -> None:
        report = _parse("certificate.txt", ReportKind.CERTIFICATE, InputForm.DER)
        assert report.kind is ReportKind.CERTIFICATE


# ── Certificate signing request ──────────────────────────────────────────────


class TestRequestReport:
    def test_top_level_labels(self) -> None:
        """
        GIVEN the text report of a signing request
        WHEN parsed end to end
        THEN the signature algorithm stays a top-level sibling of 'data'.
        """
        report = _parse("request.txt", ReportKind.REQUEST)

        assert list(report.tree) == ["data", "signature_algorithm"]
        assert report.first_value("signature_algorithm") == "sha1WithRSAEncryption"
        assert report.purposes is None

    def test_request_fields(self) -> None:
        report = _parse("request.txt", ReportKind.REQUEST, InputForm.NET)

        assert report.first_value("data", "version") == "0 (0x0)"
        subject = report.first_value("data", "subject")
        assert isinstance(subject, tuple)
        assert len(subject) == 7
        assert report.first_value("data", "attributes", UNLABELED) == "a0:00"


# ── Certificate revocation list ──────────────────────────────────────────────


class TestCrlReport:
    def test_header_fields(self) -> None:
        """
        GIVEN the text report of a CRL with two revoked serials
        WHEN parsed end to end
        THEN the list header fields are top-level labels in report order.
        """
        report = _parse("crl.txt", ReportKind.CRL, InputForm.DER)

        assert list(report.tree) == [
            UNLABELED,
            "signature_algorithm",
            "issuer",
            "last_update",
            "next_update",
            "serial_number",
        ]
        assert report.first_value(UNLABELED) == "Version 1 (0x0)"
        assert report.first_value("last_update") == "Mar 10 12:00:00 2013 GMT"
        assert report.first_value("next_update") == "Apr  9 12:00:00 2013 GMT"

    def test_slash_separated_issuer(self) -> None:
        report = _parse("crl.txt", ReportKind.CRL)

        issuer = report.first_value("issuer")
        assert isinstance(issuer, tuple)
        assert [(a.name, a.value) for a in issuer] == [
            ("C", "RU"),
            ("ST", "Moscow"),
            ("O", "My Company"),
            ("CN", "My Company Root CA"),
        ]

    def test_revoked_serials_keep_every_occurrence(self) -> None:
        """
        GIVEN two 'Serial Number' entries, each with a revocation date
        WHEN parsed
        THEN both serials and both dates are kept in order.
        """
        report = _parse("crl.txt", ReportKind.CRL)

        serials = report.lookup("serial_number")
        assert serials is not None
        assert serials.values == ("0C", "0E")
        dates = report.lookup("serial_number", "revocation_date")
        assert dates is not None
        assert dates.values == ("Mar  5 09:15:00 2013 GMT", "Mar 10 11:59:00 2013 GMT")

    def test_signature_is_not_reindented_for_crls(self) -> None:
        report = _parse("crl.txt", ReportKind.CRL)

        signature = report.lookup("signature_algorithm")
        assert signature is not None
        assert len(signature.values) == 2
        assert signature.children is not None

    def test_empty_crl_has_no_serials(self) -> None:
        report = _parse("crl_empty.txt", ReportKind.CRL)

        assert report.lookup("serial_number") is None
        assert report.first_value("issuer") is not None


# ── Tool failure ─────────────────────────────────────────────────────────────


class TestToolFailure:
    def test_failed_tool_run_is_reported(self) -> None:
        """
        GIVEN the tool exited non-zero with an error message
        WHEN the pipeline runs
        THEN TOOL_FAILURE is returned with the condensed message.
        """
        result = run_pipeline(
            b"object",
            ReportKind.CERTIFICATE,
            InputForm.PEM,
            FixtureRenderer("tool_error.txt", exit_status=1),
            TextReportParser(),
        )

        failure = ResultAssertions.assert_failure(result, ErrorCode.TOOL_FAILURE)
        assert failure.message == "unable to load certificate"

    def test_failure_detected_from_text_without_exit_status(self) -> None:
        result = run_pipeline(
            b"object",
            ReportKind.CERTIFICATE,
            InputForm.PEM,
            FixtureRenderer("tool_error.txt", exit_status=None),
            TextReportParser(),
        )

        ResultAssertions.assert_failure(result, ErrorCode.TOOL_FAILURE)

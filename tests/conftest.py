"""
Shared test fixtures and helpers for the pki-report test suite.

Provides path resolution for the text report fixtures (.txt) captured from
the PKI tool's `-noout -text` output.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from pki_report.adapters.text_parser import TextReportParser

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture()
def fixtures_dir() -> Path:
    """Return the absolute path to the test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture()
def parser() -> TextReportParser:
    """A TextReportParser with the default nesting unit."""
    return TextReportParser()


def fixture_path(filename: str) -> Path:
    """
    Resolve the absolute path to a test fixture file.

    Raises FileNotFoundError if the fixture does not exist.
    """
    path = FIXTURES_DIR / filename
    if not path.exists():
        raise FileNotFoundError(f"Test fixture not found: {path}")
    return path


def fixture_text(filename: str) -> str:
    """Read a text report fixture."""
    return fixture_path(filename).read_text(encoding="utf-8")

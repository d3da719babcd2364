"""
Text report parser adapter — indentation-grouped PKI reports → ParsedReport.

Adapter layer — implements the ReportParser port for the human-readable
reports the PKI tool prints with `-noout -text` (and `-purpose` for
certificates):

    Certificate:
        Data:
            Version: 3 (0x2)
            Serial Number: 14 (0xe)
            Signature Algorithm: sha1WithRSAEncryption
            Issuer: C=RU, ST=Moscow, O=My Company, CN=My CA
            Validity
                Not Before: Mar  1 10:00:00 2013 GMT
                ...
        Signature Algorithm: sha1WithRSAEncryption
             5a:3b:...
    Certificate purposes:
    SSL client : Yes

Pipeline:
  raw text
    → normalize_lines(): indented lines as Line(indent, text)
    → build_tree(): recursive grouping by indent, subject/issuer via parse_subject()
    → extract_purposes(): "<label> : Yes|No" flags (certificates only)
    → ParsedReport (domain model)

Everything in this module is a pure function of its input.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from itertools import chain
from types import MappingProxyType

import structlog
from railway import ErrorCode
from railway.result import Result

from pki_report.adapters.subject_parser import parse_subject
from pki_report.domain.models import (
    Line,
    ParsedReport,
    ReportKind,
    Statement,
    StatementNode,
    Value,
    freeze_node,
)

log = structlog.get_logger()

UNLABELED = "*"
DEFAULT_NESTING_UNIT = 4

_DN_LABELS = frozenset({"subject", "issuer"})
_LABEL_SEPARATOR = re.compile(r":\s|:$")
_PURPOSE_LINE = re.compile(r"^([^:]+) : (Yes|No)")
_SIGNATURE_ALGORITHM = "Signature Algorithm:"


# ─────────────────────── Line Normalizer ───────────────────────


def normalize_label(raw_label: str) -> str:
    """
    'Subject Public Key Info' → 'subject_public_key_info', 'Not After ' → 'not_after_'.

    Blanks inside the label, trailing ones included, all become underscores.
    """
    return raw_label.lower().replace(" ", "_").replace("(", "").replace(")", "")


def normalize_lines(
    text: str,
    correct_signature_indent: bool = False,
    nesting_unit: int = DEFAULT_NESTING_UNIT,
) -> list[Line]:
    """
    Split report text into indented Lines.

    Only lines that start with whitespace and carry some content are kept;
    column-0 lines are section headers ("Certificate:") or purpose flags and
    take no part in grouping.

    With correct_signature_indent, a "Signature Algorithm:" line printed at
    exactly one nesting unit (the indent of the certificate body) is pushed one
    unit deeper so it groups under the preceding body section instead of
    becoming a top-level sibling of it.
    """
    lines: list[Line] = []
    for raw_line in text.splitlines():
        content = raw_line.lstrip()
        indent = len(raw_line) - len(content)
        if indent == 0 or not content.strip():
            continue
        if (
            correct_signature_indent
            and indent == nesting_unit
            and content.startswith(_SIGNATURE_ALGORITHM)
        ):
            indent += nesting_unit
        lines.append(Line(indent=indent, text=content))
    return lines


# ─────────────────────── Indentation Tree Builder ───────────────────────


@dataclass(slots=True)
class _PendingEntry:
    """Values and child-line ranges collected for one label at one level."""

    values: list[Value] = field(default_factory=list)
    child_spans: list[range] = field(default_factory=list)

    def add_child(self, index: int) -> None:
        if self.child_spans and self.child_spans[-1].stop == index:
            last = self.child_spans[-1]
            self.child_spans[-1] = range(last.start, index + 1)
        else:
            self.child_spans.append(range(index, index + 1))


def _split_label(text: str) -> tuple[str, str]:
    """Split 'Label: remainder' (or a trailing 'Label:') at the first separator."""
    parts = _LABEL_SEPARATOR.split(text, maxsplit=1)
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[1]


def _group(lines: Sequence[Line], spans: Iterable[range]) -> Result[StatementNode]:
    """
    Group the lines selected by `spans` into one nesting level.

    A line deeper than the baseline of the current label is buffered as a child
    of that label; any other line starts a new entry. Child buffers are grouped
    recursively once the whole level has been read.
    """
    entries: dict[str, _PendingEntry] = {}
    label = ""
    baseline = 0

    for index in chain.from_iterable(spans):
        line = lines[index]
        if label and line.indent > baseline:
            entries.setdefault(label, _PendingEntry()).add_child(index)
            continue

        text = line.text.strip()
        raw_label, remainder = _split_label(text)
        label = normalize_label(raw_label)
        baseline = line.indent

        if not remainder:
            entries.setdefault(UNLABELED, _PendingEntry()).values.append(text)
        elif label in _DN_LABELS:
            attributes = parse_subject(remainder)
            if attributes.is_failure():
                return Result.failure_from(attributes.error())
            entries.setdefault(label, _PendingEntry()).values.append(attributes.value())
        else:
            entries.setdefault(label, _PendingEntry()).values.append(remainder)

    node: dict[str, Statement] = {}
    for key, pending in entries.items():
        if key == UNLABELED:
            joined = "\n".join(pending.values)
            # A bucket ending in ':' only holds headers that introduced no data.
            if not joined.endswith(":"):
                node[key] = Statement(values=(joined,))
            continue

        children: StatementNode | None = None
        if pending.child_spans:
            grouped = _group(lines, pending.child_spans)
            if grouped.is_failure():
                return grouped
            children = grouped.value()
        node[key] = Statement(values=tuple(pending.values), children=children)

    return Result.success(freeze_node(node))


def build_tree(lines: Sequence[Line]) -> Result[StatementNode]:
    """
    Build the labeled tree for a whole report.

    An empty line list yields an empty node; deciding whether that is an error
    is left to the caller. A subject/issuer that matches no attribute fails the
    whole build with MALFORMED_SUBJECT.
    """
    return _group(lines, [range(len(lines))])


# ─────────────────────── Purpose Flag Extractor ───────────────────────


def extract_purposes(text: str) -> Mapping[str, bool]:
    """
    Collect certificate purpose flags such as 'SSL client : Yes'.

    Scans every line of the raw report, column 0 included, since the tool
    prints purposes unindented after the certificate body.
    """
    purposes: dict[str, bool] = {}
    for raw_line in text.splitlines():
        matched = _PURPOSE_LINE.match(raw_line)
        if matched is not None:
            purposes[normalize_label(matched.group(1))] = matched.group(2) == "Yes"
    return MappingProxyType(purposes)


# ─────────────────────── Public Parser Class ───────────────────────


class TextReportParser:
    """
    Parse text reports of certificates, requests and CRLs.

    Implements the ReportParser port. Holds only configuration, so one
    instance can serve any number of concurrent callers.
    """

    def __init__(self, nesting_unit: int = DEFAULT_NESTING_UNIT) -> None:
        self._nesting_unit = nesting_unit

    def parse(self, text: str, kind: ReportKind) -> Result[ParsedReport]:
        """
        Parse one report into a ParsedReport.

        Returns Result.failure with:
          - EMPTY_INPUT when no text is supplied
          - MALFORMED_SUBJECT when a subject/issuer cannot be parsed
          - PARSE_PRODUCED_EMPTY when grouping found no labels, which is what
            happens when the text is an error message rather than a report
        """
        if not text or not text.strip():
            return Result.failure(ErrorCode.EMPTY_INPUT, f"No {kind.value} report text supplied")

        lines = normalize_lines(
            text,
            correct_signature_indent=kind is ReportKind.CERTIFICATE,
            nesting_unit=self._nesting_unit,
        )
        return (
            build_tree(lines)
            .ensure(
                lambda tree: len(tree) > 0,
                ErrorCode.PARSE_PRODUCED_EMPTY,
                f"No labeled lines found in {kind.value} report",
            )
            .map(lambda tree: self._assemble(tree, text, kind))
            .peek(
                lambda report: log.debug(
                    "parser.complete",
                    kind=kind.value,
                    lines=len(lines),
                    labels=len(report.tree),
                    purposes=len(report.purposes or {}),
                )
            )
            .peek_failure(
                lambda err: log.warning(
                    "parser.failed",
                    kind=kind.value,
                    error_code=err.code.value,
                    message=err.message,
                )
            )
        )

    @staticmethod
    def _assemble(tree: StatementNode, text: str, kind: ReportKind) -> ParsedReport:
        purposes = extract_purposes(text) if kind is ReportKind.CERTIFICATE else None
        return ParsedReport(kind=kind, tree=tree, raw=text, purposes=purposes)

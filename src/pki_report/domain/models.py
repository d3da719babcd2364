"""
Domain models — immutable data structures for parsed PKI text reports.

A report printed by the PKI tool in text form (certificate, signing request or
revocation list) becomes a tree of labeled Statements. Every model here is a
frozen dataclass and every mapping is exposed read-only, so a ParsedReport can
be shared freely once built.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


class ReportKind(Enum):
    """Which kind of PKI object the report describes."""

    CERTIFICATE = "certificate"
    REQUEST = "request"
    CRL = "crl"

    @property
    def accepted_forms(self) -> frozenset[InputForm]:
        """Encodings the tool accepts as input for this kind of object."""
        if self is ReportKind.REQUEST:
            return frozenset({InputForm.PEM, InputForm.DER, InputForm.NET})
        return frozenset({InputForm.PEM, InputForm.DER})


class InputForm(Enum):
    """Declared encoding of the PKI object handed to the tool."""

    PEM = "PEM"
    DER = "DER"
    NET = "NET"


@dataclass(frozen=True, slots=True)
class Line:
    """
    One report line: how deep it is indented and what follows the indent.

    `text` is kept untrimmed; the tree builder trims it when it consumes it.
    """

    indent: int
    text: str


@dataclass(frozen=True, slots=True)
class DNAttribute:
    """One relative distinguished name component, e.g. CN=Real Name."""

    name: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


Value = str | tuple[DNAttribute, ...]


@dataclass(frozen=True, slots=True)
class Statement:
    """
    Everything recorded under one label at one nesting level.

    `values` holds the text after `label: ` for every occurrence of the label,
    in encounter order; subject and issuer values are parsed attribute tuples.
    `children` is present only if deeper lines were grouped under the label.
    """

    values: tuple[Value, ...] = ()
    children: Mapping[str, Statement] | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if self.values:
            body["values"] = [_value_to_json(v) for v in self.values]
        if self.children is not None:
            body["children"] = node_to_dict(self.children)
        return body


StatementNode = Mapping[str, Statement]


def freeze_node(entries: dict[str, Statement]) -> StatementNode:
    """Wrap a freshly built label mapping so callers cannot mutate it."""
    return MappingProxyType(entries)


def node_to_dict(node: StatementNode) -> dict[str, Any]:
    return {label: statement.to_dict() for label, statement in node.items()}


def _value_to_json(value: Value) -> Any:
    if isinstance(value, str):
        return value
    return [attribute.to_dict() for attribute in value]


@dataclass(frozen=True, slots=True)
class ToolOutput:
    """
    What the external PKI tool produced for one rendering request.

    `succeeded` is the explicit success signal; the parser never inspects
    `text` to decide whether it holds a report or an error message.
    """

    text: str
    succeeded: bool = True


@dataclass(frozen=True, slots=True)
class ParsedReport:
    """
    The structured form of one text report.

    `purposes` is only filled in for certificates (an empty mapping when the
    report printed no purpose flags) and is None for requests and CRLs.
    `raw` is the exact text the parser was given.
    """

    kind: ReportKind
    tree: StatementNode
    raw: str = field(repr=False)
    purposes: Mapping[str, bool] | None = None

    def lookup(self, *labels: str) -> Statement | None:
        """
        Walk the tree through `children` along the given labels.

            report.lookup("data", "subject")
        """
        node: StatementNode | None = self.tree
        statement: Statement | None = None
        for label in labels:
            if node is None or label not in node:
                return None
            statement = node[label]
            node = statement.children
        return statement

    def first_value(self, *labels: str) -> Value | None:
        statement = self.lookup(*labels)
        if statement is None or not statement.values:
            return None
        return statement.values[0]

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "kind": self.kind.value,
            "tree": node_to_dict(self.tree),
        }
        if self.purposes is not None:
            body["purposes"] = dict(self.purposes)
        body["raw"] = self.raw
        return body

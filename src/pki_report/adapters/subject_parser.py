"""
Distinguished name parser for subject/issuer lines of text reports.

Accepts the formats the PKI tool prints depending on its version and
name options:

    /C=RU/ST=Moscow/O=My Company/CN=Real Name
    C=RU, ST=Moscow, O=My Company, CN=Real Name
    C = RU, ST = Moscow, O = My Company, CN = Real Name

Attribute order is preserved and repeated names (several OU= components are
common) are all kept.
"""

from __future__ import annotations

import re

from railway import ErrorCode
from railway.result import Result

from pki_report.domain.models import DNAttribute

# An attribute name preceded by ", " or "/" and followed by "=".
_ATTRIBUTE_TOKEN = re.compile(r"(?:,\s|/)([a-z0-9.]+)\s*=\s*", re.IGNORECASE)

# Lets the first attribute match the same separator as the following ones.
_SENTINEL = ", "

_VALUE_RESIDUE = ", "


def parse_subject(subject: str) -> Result[tuple[DNAttribute, ...]]:
    """
    Parse one subject/issuer string into ordered DNAttributes.

    Each value runs from the end of its attribute token to the start of the
    next token (or the end of the string), stripped of separator residue.

    Returns Result.failure(MALFORMED_SUBJECT) when no attribute token is found,
    so an unparseable subject is never confused with an empty one.
    """
    text = _SENTINEL + subject
    tokens = list(_ATTRIBUTE_TOKEN.finditer(text))
    if not tokens:
        return Result.failure(
            ErrorCode.MALFORMED_SUBJECT,
            f"No attribute=value pairs in subject {subject!r}",
        )

    bounds = [token.start() for token in tokens[1:]] + [len(text)]
    return Result.success(
        tuple(
            DNAttribute(
                name=token.group(1),
                value=text[token.end():end].strip(_VALUE_RESIDUE),
            )
            for token, end in zip(tokens, bounds)
        )
    )

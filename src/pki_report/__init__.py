"""
pki_report — structured records from PKI tool text reports.

Turns the indentation-formatted text an OpenSSL-style tool prints for a
certificate, signing request or revocation list into an immutable, queryable
tree of labeled statements, with subject/issuer names split into attributes
and certificate purpose flags as booleans.

Built on the Railway-Oriented Programming (ROP) helpers in `railway`:
every stage returns a Result instead of raising.
"""

__version__ = "0.1.0"

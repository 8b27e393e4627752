"""Identifier generation and validation.

Rows are keyed by CUID2 strings. Tenant and user ids arrive from other
services (JWT claims, headers) and are only accepted in a CUID/UUID-like
shape, which also keeps request ids and log lines free of injected text.
"""

import re

from cuid2 import cuid_wrapper

IDENTIFIER_MAX_LENGTH = 64
_IDENTIFIER_RE = re.compile(r"^[a-zA-Z0-9_-]{1," + str(IDENTIFIER_MAX_LENGTH) + r"}$")

_cuid = cuid_wrapper()


def generate_cuid() -> str:
    """Return a new collision-resistant id (CUID2)."""
    result = _cuid()
    if not isinstance(result, str):
        raise TypeError(f"Expected str from cuid generator, got {type(result).__name__}")
    return result


def is_valid_identifier(value: str | None) -> bool:
    """Return True if value is a non-empty alphanumeric/hyphen/underscore id of bounded length."""
    if not value or len(value) > IDENTIFIER_MAX_LENGTH:
        return False
    return bool(_IDENTIFIER_RE.fullmatch(value))

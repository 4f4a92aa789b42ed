"""
Secret redaction applied to everything before it leaves the machine.

Pure text -> text filter. Non-matching text passes through unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

REDACTED = '[REDACTED]'

SECRET_PATTERNS: Sequence[re.Pattern[str]] = (
    # key=value / key: value assignments of credential-looking names
    re.compile(r'(?:api[_-]?key|apikey|secret|password|token|auth)[=:\s]+["\']?[\w\-./+=]{8,}["\']?', re.IGNORECASE),
    # OpenAI / Stripe style prefixed keys
    re.compile(r'(?:sk-|pk_|rk_)[\w\-]{20,}'),
    # GitHub personal access tokens
    re.compile(r'ghp_\w{36}'),
    # Slack bot tokens
    re.compile(r'xoxb-[\w\-]+'),
    # PEM blocks (private keys, certificates)
    re.compile(r'-----BEGIN [A-Z ]+-----[\s\S]+?-----END [A-Z ]+-----'),
)


def redact_text(text: str) -> str:
    """Replace every secret-shaped substring with [REDACTED]."""
    if not text:
        return text
    for pattern in SECRET_PATTERNS:
        text = pattern.sub(REDACTED, text)
    return text


def redact_value(value: Any, depth: int = 0) -> Any:
    """
    Recursively redact string values inside JSON-like data (tool arguments).

    Keys are left alone; only string leaves are filtered. Nesting deeper
    than 20 levels is returned as-is.
    """
    if depth > 20:
        return value
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, Mapping):
        return {key: redact_value(item, depth + 1) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [redact_value(item, depth + 1) for item in value]
    return value

"""Scheme name sanitizing helpers."""

from __future__ import annotations

import re

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_DASH_RUNS = re.compile(r"-{2,}")
# "MySDK 1" -> "MySDK": schemes are often duplicated with a numbered suffix
_NUMBERED_SUFFIX = re.compile(r"\s+[0-9]+\Z")

FALLBACK_TOKEN = "scheme"


def sanitize_for_filesystem(name: str) -> str:
    """Return a token containing only ``[A-Za-z0-9_-]``, never empty.

    >>> sanitize_for_filesystem("My SDK/v1!")
    'My-SDK-v1'
    >>> sanitize_for_filesystem("???")
    'scheme'
    """
    token = _UNSAFE_CHARS.sub("-", name)
    token = _DASH_RUNS.sub("-", token).strip("-")
    return token or FALLBACK_TOKEN


def sanitize_for_product_match(name: str) -> str:
    """Strip a trailing whitespace + digits run; other names pass through.

    >>> sanitize_for_product_match("MySDK 12")
    'MySDK'
    >>> sanitize_for_product_match("MySDK2")
    'MySDK2'
    """
    return _NUMBERED_SUFFIX.sub("", name)

"""
core/sanitize.py -- Best-effort scrubbing of untrusted request input.

This is a denylist filter, not an HTML parser. It strips the most common
markup-injection fragments from strings and walks nested containers so a
whole JSON body or query mapping can be cleaned in one call:

  - "<" and ">" characters
  - the "javascript:" protocol marker, anywhere in the string
  - inline event-handler assignments such as "onclick=" or "onLoad ="

Output encoding at render time remains the real XSS defence; this only
reduces what reaches storage and logs.

Usage:
    sanitize({"q": "<b>hi</b>", "tags": ["javascript:x"]})
    # -> {"q": "bhi/b", "tags": ["x"]}
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

_ANGLE_BRACKETS_RE = re.compile(r"[<>]")
_JS_PROTOCOL_RE = re.compile(r"javascript:", re.IGNORECASE)
# ASCII \w so the pattern matches the same attribute names browsers recognise.
_EVENT_HANDLER_RE = re.compile(r"on\w+\s*=", re.IGNORECASE | re.ASCII)


def sanitize_string(value: str) -> str:
    """Strip markup-injection fragments from a single string, then trim it."""
    value = _ANGLE_BRACKETS_RE.sub("", value)
    value = _JS_PROTOCOL_RE.sub("", value)
    value = _EVENT_HANDLER_RE.sub("", value)
    return value.strip()


def sanitize(value: Any) -> Any:
    """Recursively sanitize strings inside value, preserving its shape.

    Lists and tuples keep their order and type. Mappings have both keys and
    values sanitized; if two keys collapse to the same sanitized key the later
    one wins. Anything that is not a string or a container is returned as-is.
    """
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, Mapping):
        return {sanitize(k): sanitize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [sanitize(item) for item in value]
    if isinstance(value, tuple):
        return tuple(sanitize(item) for item in value)
    return value

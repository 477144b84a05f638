"""Compact JSON encoding used for size accounting and storage."""

import json
import re
from typing import Any

_UNSAFE_CHARS = re.compile(r"[^a-z0-9_]")
_REPEATED_UNDERSCORES = re.compile(r"_+")


def json_bytes(data: Any) -> bytes:
    """Encode data as compact UTF-8 JSON (no whitespace between tokens)."""
    return json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def sanitize_name(name: str) -> str:
    """Turn an entity name into a lowercase, path-safe, underscore-joined form.

    Example:
        >>> sanitize_name("Cortex Access-Protocol v3.0")
        'cortex_access_protocol_v3_0'
    """
    sanitized = _UNSAFE_CHARS.sub("_", name.lower())
    sanitized = _REPEATED_UNDERSCORES.sub("_", sanitized)
    return sanitized.strip("_")

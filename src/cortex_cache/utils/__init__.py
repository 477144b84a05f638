"""Utility modules for cortex_cache."""

from .clock import utcnow
from .numbers import round_half_up
from .serialization import json_bytes, sanitize_name

__all__ = ["json_bytes", "round_half_up", "sanitize_name", "utcnow"]

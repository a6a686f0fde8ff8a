"""Utility functions for text normalization and time handling."""

from .text import collapse_whitespace, is_blank, normalize_title
from .timestamps import ensure_utc, format_timestamp, parse_timestamp, utc_now

__all__ = [
    # Text
    "collapse_whitespace",
    "normalize_title",
    "is_blank",
    # Timestamps
    "utc_now",
    "ensure_utc",
    "format_timestamp",
    "parse_timestamp",
]

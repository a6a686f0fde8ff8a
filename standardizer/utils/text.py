"""Text normalization shared by the matchers and stores."""

import re
from typing import Optional

_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: Optional[str]) -> str:
    """Trim and collapse runs of whitespace to a single space.

    Example:
        >>> collapse_whitespace("  Senior \\t  Dev ")
        'Senior Dev'
    """
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_title(text: Optional[str]) -> str:
    """Lookup key for titles, aliases and headers: trimmed and lowercased.

    Internal whitespace runs are collapsed so that "Sales  Rep" and
    "sales rep" share a key.

    Example:
        >>> normalize_title("  Full Stack   Dev ")
        'full stack dev'
    """
    return collapse_whitespace(text).lower()


def is_blank(text: Optional[str]) -> bool:
    """True for None, empty or whitespace-only strings."""
    return not text or not text.strip()

"""Parsing of monetary and numeric cell values from spreadsheets."""

import re
from typing import Optional

# Symbol -> ISO 4217 code, checked in this order
CURRENCY_SYMBOLS = {
    "€": "EUR",
    "$": "USD",
    "£": "GBP",
    "¥": "JPY",
    "CHF": "CHF",
}

_CURRENCY_RE = re.compile("|".join(re.escape(symbol) for symbol in CURRENCY_SYMBOLS))
_SPACES_RE = re.compile(r"\s+")


def parse_number(value) -> Optional[float]:
    """Parse a number written in European or US notation.

    The last separator decides the format: if the last comma comes after the
    last dot the value is European (``5.328,69``), otherwise US
    (``5,328.69``). Currency symbols and spaces are ignored.

    Args:
        value: Cell value (str, int, float or None)

    Returns:
        Parsed float, or None for blank or unparseable input

    Example:
        >>> parse_number("€5.328,69")
        5328.69
        >>> parse_number("$5,328.69")
        5328.69
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)

    cleaned = _SPACES_RE.sub("", _CURRENCY_RE.sub("", str(value)))
    if not cleaned:
        return None

    if cleaned.rfind(",") > cleaned.rfind("."):
        cleaned = cleaned.replace(".", "").replace(",", ".")
    else:
        cleaned = cleaned.replace(",", "")

    try:
        return float(cleaned)
    except ValueError:
        return None


def detect_currency(value: Optional[str]) -> Optional[str]:
    """Return the ISO code of the first known currency symbol in the value.

    Example:
        >>> detect_currency("CHF 120'000")
        'CHF'
    """
    if not value:
        return None

    for symbol, code in CURRENCY_SYMBOLS.items():
        if symbol in value:
            return code
    return None

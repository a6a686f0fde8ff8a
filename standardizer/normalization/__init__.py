"""Normalization of imported table rows and cell values.

This module provides:
- NormalizedRow: One table row after header mapping and value cleanup
- RowNormalizer: Service turning raw rows into NormalizedRow instances
- Keyword heuristics for seniority, role family and department names
- Number and currency parsing for monetary cells
"""

from .heuristics import (
    classify_role_family,
    extract_seniority_level,
    merge_names,
    standardize_department,
    strip_seniority,
)
from .models import NormalizedRow
from .service import RowNormalizer
from .values import detect_currency, parse_number

__all__ = [
    "RowNormalizer",
    "NormalizedRow",
    "extract_seniority_level",
    "strip_seniority",
    "classify_role_family",
    "standardize_department",
    "merge_names",
    "parse_number",
    "detect_currency",
]

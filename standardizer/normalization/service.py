"""Row normalization for imported employee tables.

This module implements the normalization logic that:
1. Applies a header mapping to a raw row
2. Merges split name columns and parses monetary values
3. Standardizes department names
4. Resolves the role title through the RoleMatcher
5. Adds keyword suggestions for titles the matcher could not resolve
"""

import logging
from typing import Mapping, Optional

from standardizer.logging import get_logger
from standardizer.matching.engine import RoleMatcher
from standardizer.matching.models import MatchResult
from standardizer.utils.text import collapse_whitespace

from .heuristics import (
    classify_role_family,
    extract_seniority_level,
    merge_names,
    standardize_department,
)
from .models import NormalizedRow
from .values import detect_currency, parse_number

logger = get_logger(__name__, component="normalization")

# Field id -> NormalizedRow attribute for values parsed as numbers
NUMERIC_FIELDS = {
    "baseSalary": "base_salary",
    "bonus": "bonus",
    "equityValue": "equity_value",
    "totalCompensation": "total_compensation",
    "fteFactor": "fte_factor",
}

# Field id -> NormalizedRow attribute for values kept as text
TEXT_FIELDS = {
    "email": "email",
    "location": "location",
    "level": "level",
    "employmentType": "employment_type",
    "startDate": "start_date",
}

MONETARY_FIELDS = ("baseSalary", "bonus", "equityValue", "totalCompensation")


class RowNormalizer:
    """Turns raw table rows into NormalizedRow instances.

    Responsibilities:
    - Apply the header mapping and keep unmapped columns aside
    - Parse numbers in European or US notation and detect the currency
    - Resolve role titles (or accept a precomputed MatchResult)
    - Suggest seniority and role family for unresolved titles
    """

    def __init__(self, matcher: RoleMatcher, logger_instance: Optional[logging.Logger] = None):
        """Initialize RowNormalizer.

        Args:
            matcher: RoleMatcher used for role titles
            logger_instance: Logger instance (defaults to module logger)
        """
        self.matcher = matcher
        self.logger = logger_instance or logger

    def normalize(
        self,
        row: Mapping[str, Optional[str]],
        header_mapping: Mapping[str, str],
        row_number: int = 1,
        role_match: Optional[MatchResult] = None,
    ) -> NormalizedRow:
        """Normalize a single row.

        Args:
            row: Raw header -> cell value
            header_mapping: Raw header -> canonical field id
            row_number: 1-based data row number, for logging and output
            role_match: Precomputed match for the row's role title; the
                matcher is called when omitted

        Returns:
            NormalizedRow
        """
        normalized = NormalizedRow(row_number=row_number)

        for header, raw_value in row.items():
            value = collapse_whitespace(raw_value) if isinstance(raw_value, str) else raw_value
            field_id = header_mapping.get(header)
            if field_id is None:
                if header is not None and value:
                    normalized.unmapped[header] = value
                continue
            if value:
                normalized.fields[field_id] = value

        fields = normalized.fields

        normalized.employee_name = fields.get("employeeName") or merge_names(
            fields.get("firstName"), fields.get("lastName")
        )

        for field_id, attribute in TEXT_FIELDS.items():
            setattr(normalized, attribute, fields.get(field_id))

        if "department" in fields:
            normalized.department = standardize_department(fields["department"])

        for field_id, attribute in NUMERIC_FIELDS.items():
            if field_id not in fields:
                continue
            parsed = parse_number(fields[field_id])
            if parsed is None:
                self.logger.warning(
                    f"Unparseable {field_id} value in row {row_number}",
                    extra={
                        "event": "normalization.value.unparseable",
                        "field": field_id,
                        "row_number": row_number,
                    },
                )
            setattr(normalized, attribute, parsed)

        for field_id in MONETARY_FIELDS:
            currency = detect_currency(fields.get(field_id))
            if currency:
                normalized.currency = currency
                break

        role_title = fields.get("role")
        if role_title:
            normalized.role_title = role_title
            normalized.role_match = role_match or self.matcher.match(role_title)

            if not normalized.role_match.is_match:
                normalized.suggested_seniority = extract_seniority_level(role_title)
                normalized.suggested_role_family = classify_role_family(role_title)

        self.logger.debug(
            "Row normalized",
            extra={
                "event": "normalization.row.completed",
                "row_number": row_number,
                "mapped_field_count": len(fields),
                "unmapped_column_count": len(normalized.unmapped),
                "match_type": normalized.role_match.match_type.value if normalized.role_match else None,
            },
        )
        return normalized

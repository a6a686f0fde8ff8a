"""Data models for the normalization layer."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from standardizer.matching.models import MatchResult


@dataclass
class NormalizedRow:
    """One imported table row after header mapping and value cleanup.

    Attributes:
        row_number: 1-based data row number (header row excluded)
        fields: Canonical field id -> trimmed raw cell value
        unmapped: Raw header -> value for columns without a field
        employee_name: Full name, merged from first/last name if needed
        email: Email address as given
        department: Department, standardized when a known alias
        location: Work location as given
        level: Level/grade column as given
        employment_type: Employment type as given
        start_date: Start date as given (unparsed)
        base_salary: Parsed base salary
        bonus: Parsed bonus
        equity_value: Parsed equity value
        total_compensation: Parsed total compensation
        fte_factor: Parsed FTE factor
        currency: ISO code detected from any monetary cell
        role_title: Role title as given
        role_match: Matcher result for role_title (None without a role column)
        suggested_seniority: Keyword guess, only set when the matcher found nothing
        suggested_role_family: Keyword guess, only set when the matcher found nothing
    """

    row_number: int
    fields: Dict[str, str] = field(default_factory=dict)
    unmapped: Dict[str, str] = field(default_factory=dict)
    employee_name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    level: Optional[str] = None
    employment_type: Optional[str] = None
    start_date: Optional[str] = None
    base_salary: Optional[float] = None
    bonus: Optional[float] = None
    equity_value: Optional[float] = None
    total_compensation: Optional[float] = None
    fte_factor: Optional[float] = None
    currency: Optional[str] = None
    role_title: Optional[str] = None
    role_match: Optional[MatchResult] = None
    suggested_seniority: Optional[str] = None
    suggested_role_family: Optional[str] = None

    def needs_review(self, threshold: int) -> bool:
        """True when the row has a role title whose match is missing or weak."""
        if not self.role_title:
            return False
        return self.role_match is None or self.role_match.needs_review(threshold)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row_number": self.row_number,
            "employee_name": self.employee_name,
            "email": self.email,
            "department": self.department,
            "location": self.location,
            "level": self.level,
            "employment_type": self.employment_type,
            "start_date": self.start_date,
            "base_salary": self.base_salary,
            "bonus": self.bonus,
            "equity_value": self.equity_value,
            "total_compensation": self.total_compensation,
            "fte_factor": self.fte_factor,
            "currency": self.currency,
            "role_title": self.role_title,
            "role_match": self.role_match.to_dict() if self.role_match else None,
            "suggested_seniority": self.suggested_seniority,
            "suggested_role_family": self.suggested_role_family,
            "unmapped": dict(self.unmapped),
        }

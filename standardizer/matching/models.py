"""Data models for role and header matching results.

MatchResult is what callers receive for every resolved title; the
TaxonomyMatch and LibraryMatch records carry the raw fuzzy scores between the
stores and the orchestrator.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from standardizer.domain.models import LibraryEntry, TaxonomyEntry


class MatchType(str, Enum):
    """Which tier produced a match."""

    EXACT = "exact"
    FUZZY = "fuzzy"
    TAXONOMY = "taxonomy"
    NONE = "none"


@dataclass(frozen=True)
class MatchResult:
    """Best-guess canonical role for one input title.

    Attributes:
        original_title: The title exactly as the caller passed it
        standardized_title: Canonical title (the input itself when unmatched)
        seniority_level: Canonical seniority level, if known
        role_family: Canonical role family, if known
        confidence: Integer 0-100
        match_type: Tier that produced the result
        matched_text: Library key or taxonomy alias the input was matched to
    """

    original_title: str
    standardized_title: str
    seniority_level: Optional[str]
    role_family: Optional[str]
    confidence: int
    match_type: MatchType
    matched_text: Optional[str] = None

    def __post_init__(self):
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"confidence must be within 0-100, got {self.confidence}")
        if self.match_type == MatchType.NONE and (
            self.confidence != 0 or self.standardized_title != self.original_title
        ):
            raise ValueError("Unmatched results must pass the original title through with confidence 0")

    @classmethod
    def no_match(cls, title: str) -> "MatchResult":
        """Pass-through result for a title no tier accepted."""
        return cls(
            original_title=title,
            standardized_title=title,
            seniority_level=None,
            role_family=None,
            confidence=0,
            match_type=MatchType.NONE,
        )

    @property
    def is_match(self) -> bool:
        return self.match_type != MatchType.NONE

    def needs_review(self, threshold: int) -> bool:
        """Whether a human should confirm this result before it is applied."""
        return not self.is_match or self.confidence < threshold

    def to_dict(self) -> Dict:
        return {
            "original_title": self.original_title,
            "standardized_title": self.standardized_title,
            "seniority_level": self.seniority_level,
            "role_family": self.role_family,
            "confidence": self.confidence,
            "match_type": self.match_type.value,
            "matched_text": self.matched_text,
        }


@dataclass(frozen=True)
class TaxonomyMatch:
    """Best fuzzy alias hit in the taxonomy."""

    entry: TaxonomyEntry
    alias: str
    score: float


@dataclass(frozen=True)
class LibraryMatch:
    """Best fuzzy key hit in the mapping library."""

    entry: LibraryEntry
    score: float


@dataclass(frozen=True)
class HeaderAssignment:
    """One raw header assigned to a canonical field."""

    header: str
    field_id: str
    synonym: str
    score: float


@dataclass
class HeaderMappingResult:
    """Outcome of one header mapping run.

    Attributes:
        assignments: Accepted header -> field assignments in header order
        unmapped: Headers left without a field, in header order
    """

    assignments: List[HeaderAssignment] = field(default_factory=list)
    unmapped: List[str] = field(default_factory=list)

    @property
    def mapping(self) -> Dict[str, str]:
        """Raw header -> field id, in header order."""
        return {a.header: a.field_id for a in self.assignments}

    @property
    def assigned_fields(self) -> List[str]:
        return [a.field_id for a in self.assignments]

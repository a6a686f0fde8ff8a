"""Core domain models for role taxonomy and the learned mapping library.

This module defines the data structures shared by the matchers and stores:
- SeniorityLevel: closed set of canonical seniority levels
- TaxonomyEntry: curated canonical role with its known aliases
- ContextTag: one observation context (industry / region / company size)
- ContextTags: accumulated, deduplicated context sets of a library entry
- LibraryEntry: learned, frequency-weighted mapping from a seen title
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from standardizer.utils.text import collapse_whitespace, normalize_title
from standardizer.utils.timestamps import ensure_utc


class SeniorityLevel(str, Enum):
    """Canonical seniority levels, ordered from entry level to executive."""

    JUNIOR = "Junior"
    MID = "Mid"
    SENIOR = "Senior"
    LEAD = "Lead"
    STAFF = "Staff"
    MANAGER = "Manager"
    DIRECTOR = "Director"
    VP = "VP"
    C_LEVEL = "C-Level"


class TaxonomyEntry(BaseModel):
    """Curated canonical role with its known alternate spellings.

    Entries are immutable once loaded. Several entries may share a
    role_family and seniority_level, but an alias must belong to exactly one
    entry; the seeding step enforces that across the whole taxonomy.
    """

    role_family: str = Field(..., description="Role family, e.g. 'Engineering'")
    canonical_title: str = Field(..., description="Canonical role title")
    seniority_level: SeniorityLevel = Field(..., description="Canonical seniority level")
    aliases: Tuple[str, ...] = Field(default_factory=tuple, description="Known alternate titles")
    description: Optional[str] = Field(None, description="Free-text description")

    model_config = {"frozen": True, "use_enum_values": True}

    @field_validator("role_family", "canonical_title")
    @classmethod
    def strip_required(cls, v: str) -> str:
        """Collapse whitespace and reject empty values."""
        cleaned = collapse_whitespace(v)
        if not cleaned:
            raise ValueError("Field cannot be empty or whitespace-only")
        return cleaned

    @field_validator("aliases", mode="before")
    @classmethod
    def dedupe_aliases(cls, v) -> Tuple[str, ...]:
        """Drop blank aliases and case-insensitive duplicates, keeping order."""
        if v is None:
            return ()
        seen = set()
        aliases = []
        for alias in v:
            cleaned = collapse_whitespace(alias)
            key = cleaned.lower()
            if cleaned and key not in seen:
                seen.add(key)
                aliases.append(cleaned)
        return tuple(aliases)

    def has_alias(self, title: str) -> bool:
        """Case-insensitive alias membership check."""
        key = normalize_title(title)
        return any(alias.lower() == key for alias in self.aliases)


class ContextTag(BaseModel):
    """Where a single confirmation was observed. All fields optional."""

    industry: Optional[str] = None
    region: Optional[str] = None
    company_size: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("industry", "region", "company_size")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        cleaned = collapse_whitespace(v)
        return cleaned or None

    @property
    def is_empty(self) -> bool:
        return not (self.industry or self.region or self.company_size)


def _union(values: List[str], new_value: Optional[str]) -> List[str]:
    if new_value and new_value not in values:
        return [*values, new_value]
    return list(values)


class ContextTags(BaseModel):
    """Accumulated context sets of a library entry (ordered, no duplicates)."""

    industries: List[str] = Field(default_factory=list)
    regions: List[str] = Field(default_factory=list)
    company_sizes: List[str] = Field(default_factory=list)

    @field_validator("industries", "regions", "company_sizes", mode="before")
    @classmethod
    def dedupe(cls, v) -> List[str]:
        if v is None:
            return []
        result: List[str] = []
        for item in v:
            result = _union(result, item)
        return result

    def merge(self, tag: Optional[ContextTag]) -> "ContextTags":
        """Return a new ContextTags with the tag's values unioned in."""
        if tag is None or tag.is_empty:
            return self.model_copy(deep=True)
        return ContextTags(
            industries=_union(self.industries, tag.industry),
            regions=_union(self.regions, tag.region),
            company_sizes=_union(self.company_sizes, tag.company_size),
        )

    @classmethod
    def from_tag(cls, tag: Optional[ContextTag]) -> "ContextTags":
        return cls().merge(tag)


class LibraryEntry(BaseModel):
    """Learned mapping from one previously seen title to a canonical role.

    The normalized_original_title is the unique lookup key. Canonical values
    (standardized_title, seniority_level, role_family) are fixed by the first
    confirmation; later confirmations only raise frequency and merge tags.
    """

    normalized_original_title: str = Field(..., description="Lowercased, trimmed lookup key")
    standardized_title: str = Field(..., description="Canonical title this maps to")
    seniority_level: Optional[str] = Field(None, description="Canonical seniority level")
    role_family: Optional[str] = Field(None, description="Canonical role family")
    frequency: int = Field(1, ge=1, description="Number of confirmations")
    verified_count: int = Field(0, ge=0, description="Explicit user verifications")
    reported_issue_count: int = Field(0, ge=0, description="Explicit user issue reports")
    context_tags: ContextTags = Field(default_factory=ContextTags)
    last_seen_at: datetime = Field(..., description="Last confirmation time (UTC)")

    @field_validator("normalized_original_title")
    @classmethod
    def normalize_key(cls, v: str) -> str:
        key = normalize_title(v)
        if not key:
            raise ValueError("normalized_original_title cannot be empty")
        return key

    @field_validator("standardized_title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        cleaned = collapse_whitespace(v)
        if not cleaned:
            raise ValueError("standardized_title cannot be empty")
        return cleaned

    @field_validator("last_seen_at")
    @classmethod
    def last_seen_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @property
    def quality_score(self) -> int:
        """Net user feedback: verifications minus reported issues."""
        return self.verified_count - self.reported_issue_count

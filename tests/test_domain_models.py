"""Unit tests for domain models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from standardizer.domain.models import (
    ContextTag,
    ContextTags,
    LibraryEntry,
    SeniorityLevel,
    TaxonomyEntry,
)


class TestTaxonomyEntry:
    """Tests for TaxonomyEntry model."""

    def test_valid_entry(self):
        """Test creating a valid entry."""
        entry = TaxonomyEntry(
            role_family="Sales",
            canonical_title="Sales Development Representative",
            seniority_level="Junior",
            aliases=["SDR", "sales development rep"],
            description="Outbound prospecting",
        )

        assert entry.role_family == "Sales"
        assert entry.seniority_level == "Junior"
        assert entry.aliases == ("SDR", "sales development rep")

    def test_seniority_accepts_enum(self):
        """Test that enum members are stored as their values."""
        entry = TaxonomyEntry(
            role_family="Leadership", canonical_title="CEO", seniority_level=SeniorityLevel.C_LEVEL
        )
        assert entry.seniority_level == "C-Level"

    def test_rejects_unknown_seniority(self):
        """Test that seniority outside the closed set is rejected."""
        with pytest.raises(ValidationError):
            TaxonomyEntry(role_family="Sales", canonical_title="AE", seniority_level="Ninja")

    def test_rejects_empty_required_fields(self):
        """Test that whitespace-only family or title is rejected."""
        with pytest.raises(ValidationError):
            TaxonomyEntry(role_family="  ", canonical_title="AE", seniority_level="Mid")
        with pytest.raises(ValidationError):
            TaxonomyEntry(role_family="Sales", canonical_title="", seniority_level="Mid")

    def test_aliases_are_cleaned_and_deduplicated(self):
        """Test that blank and case-insensitive duplicate aliases are dropped."""
        entry = TaxonomyEntry(
            role_family="Sales",
            canonical_title="Account Executive",
            seniority_level="Mid",
            aliases=["AE", " ae ", "", "Account  Executive", "account executive"],
        )
        assert entry.aliases == ("AE", "Account Executive")

    def test_has_alias_is_case_insensitive(self):
        """Test alias membership."""
        entry = TaxonomyEntry(
            role_family="Sales", canonical_title="Account Executive", seniority_level="Mid", aliases=["AE"]
        )
        assert entry.has_alias("ae")
        assert entry.has_alias("  AE ")
        assert not entry.has_alias("account executive")

    def test_entry_is_immutable(self):
        """Test that loaded entries cannot be modified."""
        entry = TaxonomyEntry(role_family="Sales", canonical_title="AE", seniority_level="Mid")
        with pytest.raises(ValidationError):
            entry.canonical_title = "Other"


class TestContextTags:
    """Tests for ContextTag and ContextTags."""

    def test_blank_values_become_none(self):
        """Test that blank tag values are dropped."""
        tag = ContextTag(industry="  ", region=" EU ")
        assert tag.industry is None
        assert tag.region == "EU"
        assert not tag.is_empty

    def test_empty_tag(self):
        """Test is_empty."""
        assert ContextTag().is_empty

    def test_merge_unions_values(self):
        """Test that merge adds new values and keeps order."""
        tags = ContextTags(regions=["EU"])
        merged = tags.merge(ContextTag(region="US", industry="SaaS"))

        assert merged.regions == ["EU", "US"]
        assert merged.industries == ["SaaS"]
        assert merged.company_sizes == []
        assert tags.regions == ["EU"]

    def test_merge_ignores_existing_values(self):
        """Test that merge never duplicates a value."""
        merged = ContextTags(regions=["EU"]).merge(ContextTag(region="EU"))
        assert merged.regions == ["EU"]

    def test_merge_with_none(self):
        """Test that merging nothing returns an equal copy."""
        tags = ContextTags(industries=["Fintech"])
        assert tags.merge(None) == tags

    def test_constructor_deduplicates(self):
        """Test that stored lists with duplicates are cleaned on load."""
        assert ContextTags(industries=["A", "A", "B"]).industries == ["A", "B"]

    def test_from_tag(self):
        """Test building tags from a single observation."""
        tags = ContextTags.from_tag(ContextTag(company_size="51-200"))
        assert tags.company_sizes == ["51-200"]


class TestLibraryEntry:
    """Tests for LibraryEntry model."""

    def test_valid_entry(self):
        """Test creating a valid entry with defaults."""
        entry = LibraryEntry(
            normalized_original_title="Full Stack Dev",
            standardized_title="Software Engineer",
            last_seen_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        )

        assert entry.normalized_original_title == "full stack dev"
        assert entry.frequency == 1
        assert entry.verified_count == 0
        assert entry.reported_issue_count == 0
        assert entry.context_tags == ContextTags()

    def test_converts_naive_datetime_to_utc(self):
        """Test that naive last_seen_at is treated as UTC."""
        entry = LibraryEntry(
            normalized_original_title="dev",
            standardized_title="Software Engineer",
            last_seen_at=datetime(2025, 1, 1, 12, 0),
        )
        assert entry.last_seen_at.tzinfo == timezone.utc

    def test_rejects_blank_key_or_title(self):
        """Test that blank key or canonical title is rejected."""
        now = datetime.now(timezone.utc)
        with pytest.raises(ValidationError):
            LibraryEntry(normalized_original_title=" ", standardized_title="X", last_seen_at=now)
        with pytest.raises(ValidationError):
            LibraryEntry(normalized_original_title="x", standardized_title=" ", last_seen_at=now)

    def test_rejects_invalid_counters(self):
        """Test counter bounds."""
        now = datetime.now(timezone.utc)
        with pytest.raises(ValidationError):
            LibraryEntry(
                normalized_original_title="x", standardized_title="X", frequency=0, last_seen_at=now
            )
        with pytest.raises(ValidationError):
            LibraryEntry(
                normalized_original_title="x", standardized_title="X", verified_count=-1, last_seen_at=now
            )

    def test_quality_score(self):
        """Test net feedback score."""
        entry = LibraryEntry(
            normalized_original_title="x",
            standardized_title="X",
            verified_count=4,
            reported_issue_count=6,
            last_seen_at=datetime.now(timezone.utc),
        )
        assert entry.quality_score == -2

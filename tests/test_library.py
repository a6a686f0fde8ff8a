"""Unit tests for the learned role library."""

from unittest.mock import MagicMock

import pytest

from standardizer.domain.models import ContextTag
from standardizer.matching.library import RoleLibrary
from tests.helpers import InMemoryLibraryStore, make_library_entry


@pytest.fixture
def store():
    return InMemoryLibraryStore(
        [
            make_library_entry("full stack dev", "Software Engineer", "Mid", "Engineering", frequency=4),
            make_library_entry("sales rep", "Account Executive", "Mid", "Sales"),
        ]
    )


@pytest.fixture
def library(store):
    return RoleLibrary(store)


class TestFindExact:
    """Test exact key lookup."""

    def test_lookup_uses_normalized_key(self, library):
        entry = library.find_exact("  Full Stack  DEV ")
        assert entry.standardized_title == "Software Engineer"

    def test_miss_returns_none(self, library):
        assert library.find_exact("Head of Trees") is None

    def test_blank_title_skips_store(self, store, library):
        assert library.find_exact("  ") is None
        assert store.get_calls == 0


class TestFuzzyFindBest:
    """Test fuzzy key lookup."""

    def test_close_key_matches(self, library):
        match = library.fuzzy_find_best("full stak dev")
        assert match.entry.normalized_original_title == "full stack dev"
        assert match.score == pytest.approx(13 / 14)

    def test_below_floor_returns_none(self, library):
        assert library.fuzzy_find_best("legal counsel") is None

    def test_higher_frequency_wins_equal_scores(self):
        store = InMemoryLibraryStore(
            [
                make_library_entry("sr. devs", "Developer", frequency=1),
                make_library_entry("sr. deva", "Senior Software Engineer", "Senior", frequency=7),
            ]
        )
        match = RoleLibrary(store).fuzzy_find_best("sr. dev")
        assert match.entry.standardized_title == "Senior Software Engineer"

    def test_store_order_is_not_trusted_for_frequency(self):
        store = MagicMock()
        store.list_by_frequency.return_value = [
            make_library_entry("sr. devs", "Developer", frequency=1),
            make_library_entry("sr. deva", "Senior Software Engineer", frequency=2),
        ]
        match = RoleLibrary(store).fuzzy_find_best("sr. dev")
        assert match.entry.standardized_title == "Senior Software Engineer"


class TestUpsert:
    """Test recording confirmations."""

    def test_creates_entry(self, store, library):
        entry = library.upsert("Werkstudent Sales", "Sales Intern", "Junior", "Sales")
        assert entry.normalized_original_title == "werkstudent sales"
        assert entry.frequency == 1
        assert store.entries["werkstudent sales"].standardized_title == "Sales Intern"

    def test_existing_entry_keeps_canonical_values(self, library):
        entry = library.upsert("Sales Rep", "Sales Representative", "Junior", "Marketing")
        assert entry.standardized_title == "Account Executive"
        assert entry.seniority_level == "Mid"
        assert entry.role_family == "Sales"
        assert entry.frequency == 2

    def test_context_tags_are_merged(self, library):
        library.upsert("sales rep", "Account Executive", context_tag=ContextTag(region="EU"))
        entry = library.upsert(
            "sales rep", "Account Executive", context_tag=ContextTag(region="US", industry="SaaS")
        )
        assert entry.context_tags.regions == ["EU", "US"]
        assert entry.context_tags.industries == ["SaaS"]

    def test_blank_titles_rejected(self, library):
        with pytest.raises(ValueError):
            library.upsert("  ", "Software Engineer")
        with pytest.raises(ValueError):
            library.upsert("dev", "")


class TestFeedbackCounters:
    """Test verify() and report()."""

    def test_verify_known_key(self, store, library):
        assert library.verify("Sales Rep") is True
        assert store.entries["sales rep"].verified_count == 1

    def test_report_known_key(self, store, library):
        assert library.report("sales rep") is True
        assert library.report("sales rep") is True
        assert store.entries["sales rep"].reported_issue_count == 2

    def test_unknown_key_is_noop(self, store, library):
        assert library.verify("unknown title") is False
        assert library.report("unknown title") is False
        assert "unknown title" not in store.entries

    def test_blank_title_is_noop(self, library):
        assert library.verify("") is False

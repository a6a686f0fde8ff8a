"""Unit tests for the feedback loop."""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from standardizer.matching.feedback import FeedbackLoop
from standardizer.matching.library import RoleLibrary
from standardizer.persistence import SqlLibraryStore
from tests.helpers import FailingStore, InMemoryLibraryStore


@pytest.fixture
def store():
    return InMemoryLibraryStore()


@pytest.fixture
def feedback(store):
    return FeedbackLoop(RoleLibrary(store))


class TestConfirmMapping:
    """Test confirm_mapping()."""

    def test_creates_entry_with_context(self, store, feedback):
        assert feedback.confirm_mapping(
            "Full Stack Dev",
            "Software Engineer",
            seniority_level="Mid",
            role_family="Engineering",
            industry="SaaS",
            region="EU",
            company_size="51-200",
        )
        entry = store.entries["full stack dev"]
        assert entry.standardized_title == "Software Engineer"
        assert entry.seniority_level == "Mid"
        assert entry.role_family == "Engineering"
        assert entry.context_tags.industries == ["SaaS"]
        assert entry.context_tags.regions == ["EU"]
        assert entry.context_tags.company_sizes == ["51-200"]

    def test_repeat_confirmations_increment_frequency(self, store, feedback):
        feedback.confirm_mapping("Full Stack Dev", "Software Engineer")
        feedback.confirm_mapping("full stack dev", "Software Engineer")
        feedback.confirm_mapping("FULL STACK DEV", "Fullstack Engineer")

        entry = store.entries["full stack dev"]
        assert entry.frequency == 3
        assert entry.standardized_title == "Software Engineer"

    def test_context_accumulates_without_duplicates(self, store, feedback):
        feedback.confirm_mapping("sdr", "Sales Development Representative", region="EU")
        feedback.confirm_mapping("sdr", "Sales Development Representative", region="US")
        feedback.confirm_mapping("sdr", "Sales Development Representative", region="EU")
        assert store.entries["sdr"].context_tags.regions == ["EU", "US"]

    def test_blank_titles_are_skipped(self, store, feedback, caplog):
        with caplog.at_level("WARNING"):
            assert feedback.confirm_mapping("  ", "Software Engineer") is False
            assert feedback.confirm_mapping("dev", "") is False
        assert store.entries == {}
        assert any(getattr(r, "event", None) == "feedback.confirm.skipped" for r in caplog.records)

    def test_store_failure_is_swallowed(self, caplog):
        feedback = FeedbackLoop(RoleLibrary(FailingStore()))
        with caplog.at_level("ERROR"):
            assert feedback.confirm_mapping("dev", "Software Engineer") is False
        assert any(getattr(r, "event", None) == "feedback.confirm.failed" for r in caplog.records)


class TestVerifyAndReport:
    """Test mark_verified() and mark_reported()."""

    def test_verify_existing(self, store, feedback):
        feedback.confirm_mapping("sdr", "Sales Development Representative")
        assert feedback.mark_verified("SDR") is True
        assert feedback.mark_verified("sdr") is True
        assert store.entries["sdr"].verified_count == 2

    def test_report_existing(self, store, feedback):
        feedback.confirm_mapping("sdr", "Sales Development Representative")
        assert feedback.mark_reported("sdr") is True
        assert store.entries["sdr"].reported_issue_count == 1
        assert store.entries["sdr"].quality_score == -1

    def test_unknown_title_is_noop(self, store, feedback):
        assert feedback.mark_verified("nobody") is False
        assert feedback.mark_reported("nobody") is False
        assert store.entries == {}

    def test_blank_title_is_noop(self, feedback):
        assert feedback.mark_verified("") is False
        assert feedback.mark_reported(None) is False

    def test_store_failure_is_swallowed(self, caplog):
        feedback = FeedbackLoop(RoleLibrary(FailingStore()))
        with caplog.at_level("ERROR"):
            assert feedback.mark_verified("dev") is False
            assert feedback.mark_reported("dev") is False
        events = {getattr(r, "event", None) for r in caplog.records}
        assert {"feedback.verify.failed", "feedback.report.failed"} <= events


def locked_commit():
    return patch(
        "sqlalchemy.orm.Session.commit",
        side_effect=OperationalError("COMMIT", {}, Exception("database is locked")),
    )


class TestCommitFailures:
    """Test that a failed commit on the SQL store is reported, not raised."""

    @pytest.fixture
    def sql_feedback(self, memory_database):
        return FeedbackLoop(RoleLibrary(SqlLibraryStore()))

    def test_confirm_returns_false(self, sql_feedback, caplog):
        with caplog.at_level("ERROR"), locked_commit():
            assert sql_feedback.confirm_mapping("Sales Rep", "Account Executive") is False
        assert any(getattr(r, "event", None) == "feedback.confirm.failed" for r in caplog.records)
        assert SqlLibraryStore().get("sales rep") is None

    def test_verify_and_report_return_false(self, sql_feedback, caplog):
        assert sql_feedback.confirm_mapping("Sales Rep", "Account Executive") is True

        with caplog.at_level("ERROR"), locked_commit():
            assert sql_feedback.mark_verified("Sales Rep") is False
            assert sql_feedback.mark_reported("Sales Rep") is False

        events = {getattr(r, "event", None) for r in caplog.records}
        assert {"feedback.verify.failed", "feedback.report.failed"} <= events
        entry = SqlLibraryStore().get("sales rep")
        assert entry.verified_count == 0
        assert entry.reported_issue_count == 0

"""Integration tests for importing tables against a real SQLite database.

Tests the complete flow from a CSV file through header mapping, role
matching against the bundled taxonomy, normalization and learning.
"""

import pytest

from standardizer.config.models import AppConfig
from standardizer.matching import MatchType
from standardizer.persistence import RoleLibraryRepository, get_session, load_taxonomy_seed, seed_taxonomy
from standardizer.service import build_service

STAFF_CSV = (
    "Vorname;Nachname;Abteilung;Position;Gehalt;FTE\n"
    "Ada;Lovelace;Tech;Software Developer;72000;1\n"
    "Grace;Hopper;Vertrieb;SDR;55000;0,8\n"
    "Alan;Turing;Tech;Sofware Developer;80000;1\n"
)


@pytest.fixture
def service(file_database):
    """Service over a seeded file-backed database."""
    seed_taxonomy(load_taxonomy_seed())
    return build_service(AppConfig())


@pytest.fixture
def staff_csv(tmp_path):
    path = tmp_path / "staff.csv"
    path.write_text(STAFF_CSV, encoding="utf-8")
    return path


class TestImportEndToEnd:
    """Test importing a German payroll export."""

    def test_first_import_uses_taxonomy(self, service, staff_csv):
        """Test a run against an empty library."""
        result = service.import_table(staff_csv)

        assert result.error_count == 0
        assert result.header_mapping == {
            "Vorname": "firstName",
            "Nachname": "lastName",
            "Abteilung": "department",
            "Position": "role",
            "Gehalt": "baseSalary",
            "FTE": "fteFactor",
        }

        developer, sdr, typo = result.rows
        assert developer.role_match.match_type == MatchType.TAXONOMY
        assert developer.role_match.confidence == 80
        assert developer.role_match.standardized_title == "Software Engineer"
        assert developer.role_match.seniority_level == "Mid"
        assert developer.department == "Engineering"

        assert sdr.role_match.standardized_title == "Sales Development Representative"
        assert sdr.department == "Sales"
        assert sdr.fte_factor == pytest.approx(0.8)

        assert typo.role_match.match_type == MatchType.TAXONOMY
        assert typo.role_match.confidence == 85
        assert typo.role_match.matched_text == "Software Developer"

        assert result.match_counts["taxonomy"] == 3
        assert result.confirmed_count == 0

    def test_learned_mappings_are_used_by_the_next_import(self, service, staff_csv):
        """Test that auto-confirmed matches become exact library hits."""
        first = service.import_table(staff_csv, auto_confirm_threshold=80)
        assert first.confirmed_count == 3

        with get_session() as session:
            entries = RoleLibraryRepository(session).list_by_frequency()
        assert {e.normalized_original_title for e in entries} == {"software developer", "sdr", "sofware developer"}
        assert all(e.context_tags.regions == ["EU"] for e in entries)

        second = service.import_table(staff_csv)

        assert second.match_counts["exact"] == 3
        assert all(row.role_match.confidence == 100 for row in second.rows)
        assert second.review_count == 0

        with get_session() as session:
            entry = RoleLibraryRepository(session).get_by_key("sofware developer")
        assert entry.standardized_title == "Software Engineer"
        assert entry.frequency == 1

    def test_repeated_confirmation_counts_frequency(self, service, staff_csv):
        """Test that each auto-confirmed import bumps frequency."""
        service.import_table(staff_csv, auto_confirm_threshold=80)
        service.import_table(staff_csv, auto_confirm_threshold=80)

        with get_session() as session:
            entry = RoleLibraryRepository(session).get_by_key("sdr")
        assert entry.frequency == 2

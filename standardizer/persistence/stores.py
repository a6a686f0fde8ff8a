"""SQL-backed store handles for the matchers.

Each call opens its own session through get_session(), so the handles are
safe to share across threads and every write commits on its own.
"""

from datetime import datetime
from typing import List, Optional

from standardizer.domain.models import ContextTag, LibraryEntry, TaxonomyEntry

from .database import get_session
from .repositories import RoleLibraryRepository, TaxonomyRepository


class SqlTaxonomyStore:
    """TaxonomyStore reading the role_taxonomy table."""

    def list_entries(self) -> List[TaxonomyEntry]:
        with get_session() as session:
            return TaxonomyRepository(session).list_all()


class SqlLibraryStore:
    """LibraryStore over the role_title_library table."""

    def get(self, key: str) -> Optional[LibraryEntry]:
        with get_session() as session:
            return RoleLibraryRepository(session).get_by_key(key)

    def list_by_frequency(self) -> List[LibraryEntry]:
        with get_session() as session:
            return RoleLibraryRepository(session).list_by_frequency()

    def upsert(
        self,
        key: str,
        standardized_title: str,
        seniority_level: Optional[str],
        role_family: Optional[str],
        context_tag: Optional[ContextTag],
        seen_at: datetime,
    ) -> LibraryEntry:
        with get_session() as session:
            return RoleLibraryRepository(session).upsert(
                key, standardized_title, seniority_level, role_family, context_tag, seen_at
            )

    def increment_verified(self, key: str) -> bool:
        with get_session() as session:
            return RoleLibraryRepository(session).increment_verified(key)

    def increment_reported(self, key: str) -> bool:
        with get_session() as session:
            return RoleLibraryRepository(session).increment_reported(key)

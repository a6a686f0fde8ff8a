"""Store handles the matchers are built on.

The taxonomy and library components never talk to a database directly; they
receive one of these handles. The SQL implementations live in
standardizer.persistence.stores; tests use in-memory ones.

Implementations signal an unavailable or failing backend by raising
standardizer.persistence.exceptions.PersistenceError.
"""

from datetime import datetime
from typing import List, Optional, Protocol

from standardizer.domain.models import ContextTag, LibraryEntry, TaxonomyEntry


class TaxonomyStore(Protocol):
    """Read access to the curated role taxonomy."""

    def list_entries(self) -> List[TaxonomyEntry]:
        """All taxonomy entries in a stable order."""
        ...


class LibraryStore(Protocol):
    """Read/write access to the learned mapping library.

    Keys passed in are already normalized (see utils.text.normalize_title).
    Writes to the same key must be serialized by the store so that concurrent
    increments are never lost.
    """

    def get(self, key: str) -> Optional[LibraryEntry]:
        """Entry for an exact key; the highest frequency one if duplicated."""
        ...

    def list_by_frequency(self) -> List[LibraryEntry]:
        """All entries, most frequently confirmed first."""
        ...

    def upsert(
        self,
        key: str,
        standardized_title: str,
        seniority_level: Optional[str],
        role_family: Optional[str],
        context_tag: Optional[ContextTag],
        seen_at: datetime,
    ) -> LibraryEntry:
        """Create the entry, or bump frequency/tags/last_seen_at of an existing one.

        Canonical values of an existing entry are never overwritten.
        """
        ...

    def increment_verified(self, key: str) -> bool:
        """Atomically add one verification. Returns False if key is absent."""
        ...

    def increment_reported(self, key: str) -> bool:
        """Atomically add one reported issue. Returns False if key is absent."""
        ...

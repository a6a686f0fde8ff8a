"""The learned role mapping library.

Every confirmed (original title -> canonical role) pair from an import lands
here. Entries gain frequency with each confirmation and collect verification
and issue-report counters from explicit user feedback; the orchestrator turns
those counters into confidence adjustments.
"""

import logging
from typing import Optional

from standardizer.domain.models import ContextTag, LibraryEntry
from standardizer.logging import get_logger
from standardizer.utils.text import collapse_whitespace, normalize_title
from standardizer.utils.timestamps import utc_now

from .models import LibraryMatch
from .similarity import SimilarityScorer
from .stores import LibraryStore

logger = get_logger(__name__, component="library")

DEFAULT_LIBRARY_FUZZY_FLOOR = 0.70


class RoleLibrary:
    """Exact/fuzzy lookup and feedback writes over a LibraryStore."""

    def __init__(
        self,
        store: LibraryStore,
        scorer: Optional[SimilarityScorer] = None,
        fuzzy_floor: float = DEFAULT_LIBRARY_FUZZY_FLOOR,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize RoleLibrary.

        Args:
            store: Library store handle
            scorer: Similarity scorer (defaults to SimilarityScorer())
            fuzzy_floor: Minimum similarity for fuzzy_find_best to accept
            logger_instance: Optional logger (defaults to module logger)
        """
        self.store = store
        self.scorer = scorer or SimilarityScorer()
        self.fuzzy_floor = fuzzy_floor
        self.logger = logger_instance or logger

    def find_exact(self, title: str) -> Optional[LibraryEntry]:
        """Look up an entry by the normalized form of the title."""
        key = normalize_title(title)
        if not key:
            return None
        return self.store.get(key)

    def fuzzy_find_best(self, title: str) -> Optional[LibraryMatch]:
        """Score the title against every entry's normalized original title.

        Candidates are scored most-frequent first and only a strictly better
        score replaces the current best, so on equal similarity the more
        frequently confirmed entry wins.

        Returns:
            LibraryMatch for the best entry, or None below the fuzzy floor
        """
        if not normalize_title(title):
            return None

        # stable sort: keeps store order among equal frequencies
        entries = sorted(self.store.list_by_frequency(), key=lambda e: -e.frequency)
        best = self.scorer.best_match(
            title, ((entry, entry.normalized_original_title) for entry in entries)
        )

        if best is None or best.score < self.fuzzy_floor:
            return None

        return LibraryMatch(entry=best.item, score=best.score)

    def upsert(
        self,
        original_title: str,
        standardized_title: str,
        seniority_level: Optional[str] = None,
        role_family: Optional[str] = None,
        context_tag: Optional[ContextTag] = None,
    ) -> LibraryEntry:
        """Record one confirmation of a mapping.

        An existing entry keeps its canonical values; only frequency,
        context tags and last_seen_at change. Use verify()/report() to
        influence how much an entry is trusted.

        Raises:
            ValueError: If either title is blank
            PersistenceError: If the store write fails
        """
        key = normalize_title(original_title)
        canonical = collapse_whitespace(standardized_title)
        if not key:
            raise ValueError("original_title cannot be empty")
        if not canonical:
            raise ValueError("standardized_title cannot be empty")

        entry = self.store.upsert(
            key,
            canonical,
            seniority_level or None,
            role_family or None,
            context_tag,
            utc_now(),
        )

        created = entry.frequency == 1
        self.logger.info(
            "Library entry created" if created else "Library entry confirmed again",
            extra={
                "event": "library.upsert.created" if created else "library.upsert.updated",
                "library_key": key,
                "standardized_title": entry.standardized_title,
                "frequency": entry.frequency,
                "canonical_kept": not created and entry.standardized_title != canonical,
            },
        )
        return entry

    def verify(self, title: str) -> bool:
        """Add one verification; no-op (False) when the key is unknown."""
        return self._increment(title, "verified")

    def report(self, title: str) -> bool:
        """Add one reported issue; no-op (False) when the key is unknown."""
        return self._increment(title, "reported")

    def _increment(self, title: str, counter: str) -> bool:
        key = normalize_title(title)
        if not key:
            return False

        if counter == "verified":
            found = self.store.increment_verified(key)
        else:
            found = self.store.increment_reported(key)

        self.logger.info(
            f"Library feedback {counter}" if found else f"Library feedback {counter} ignored: unknown title",
            extra={
                "event": f"library.{counter}" if found else f"library.{counter}.unknown_key",
                "library_key": key,
            },
        )
        return found

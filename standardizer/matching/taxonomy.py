"""Lookups against the curated role taxonomy."""

import logging
from typing import Optional

from standardizer.domain.models import TaxonomyEntry
from standardizer.logging import get_logger
from standardizer.utils.text import normalize_title

from .models import TaxonomyMatch
from .similarity import SimilarityScorer
from .stores import TaxonomyStore

logger = get_logger(__name__, component="taxonomy")

DEFAULT_TAXONOMY_FUZZY_FLOOR = 0.75


class RoleTaxonomy:
    """Exact and fuzzy alias lookup over a TaxonomyStore.

    Read-only: the taxonomy is populated by the seeding step and never
    written at match time.
    """

    def __init__(
        self,
        store: TaxonomyStore,
        scorer: Optional[SimilarityScorer] = None,
        fuzzy_floor: float = DEFAULT_TAXONOMY_FUZZY_FLOOR,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize RoleTaxonomy.

        Args:
            store: Taxonomy store handle
            scorer: Similarity scorer (defaults to SimilarityScorer())
            fuzzy_floor: Minimum similarity for fuzzy_find_by_alias to accept
            logger_instance: Optional logger (defaults to module logger)
        """
        self.store = store
        self.scorer = scorer or SimilarityScorer()
        self.fuzzy_floor = fuzzy_floor
        self.logger = logger_instance or logger

    def find_by_alias(self, title: str) -> Optional[TaxonomyEntry]:
        """Exact, case-insensitive alias lookup across all entries.

        Returns:
            The first entry (store order) owning the alias, or None
        """
        key = normalize_title(title)
        if not key:
            return None

        for entry in self.store.list_entries():
            if entry.has_alias(key):
                return entry
        return None

    def fuzzy_find_by_alias(self, title: str) -> Optional[TaxonomyMatch]:
        """Score the title against every alias of every entry.

        Returns:
            TaxonomyMatch for the single best (entry, alias) pair, or None if
            the best score is below the fuzzy floor
        """
        if not normalize_title(title):
            return None

        entries = self.store.list_entries()
        candidates = ((entry, alias) for entry in entries for alias in entry.aliases)
        best = self.scorer.best_match(title, candidates)

        if best is None or best.score < self.fuzzy_floor:
            self.logger.debug(
                "No taxonomy alias above floor",
                extra={
                    "event": "taxonomy.fuzzy.miss",
                    "best_score": round(best.score, 3) if best else None,
                    "floor": self.fuzzy_floor,
                },
            )
            return None

        return TaxonomyMatch(entry=best.item, alias=best.text, score=best.score)

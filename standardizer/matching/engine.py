"""Role title resolution cascade.

This module implements the tiered matcher that:
1. Tries an exact hit in the learned library
2. Tries the best fuzzy hit in the learned library
3. Tries the curated taxonomy (exact alias, then fuzzy alias)
4. Falls back to passing the title through unmatched

The first tier that produces an acceptable result wins; lower tiers are not
consulted afterwards.
"""

import contextvars
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from standardizer.config.models import MatchingConfig
from standardizer.logging import get_logger
from standardizer.persistence.exceptions import PersistenceError
from standardizer.utils.text import is_blank, normalize_title

from .library import RoleLibrary
from .models import MatchResult, MatchType
from .taxonomy import RoleTaxonomy

logger = get_logger(__name__, component="matching")

# Confidence calibration per tier
EXACT_MIN_CONFIDENCE = 85
REPORTED_ISSUE_PENALTY = 5
FUZZY_MIN_CONFIDENCE = 85
FUZZY_MAX_CONFIDENCE = 99
QUALITY_BONUS_CAP = 5
TAXONOMY_EXACT_CONFIDENCE = 80
TAXONOMY_FUZZY_MIN_CONFIDENCE = 75
TAXONOMY_FUZZY_MAX_CONFIDENCE = 85


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _to_percent(score: float) -> int:
    """Round a [0, 1] similarity to an integer percentage, halves rounding up."""
    return int(math.floor(score * 100 + 0.5))


class RoleMatcher:
    """Resolves free-text role titles to canonical roles.

    Responsibilities:
    - Run the library/taxonomy cascade for one title
    - Calibrate confidence per tier from similarity and feedback counters
    - Degrade gracefully when a store is unavailable
    - Resolve batches, optionally in parallel
    """

    def __init__(
        self,
        library: RoleLibrary,
        taxonomy: RoleTaxonomy,
        config: Optional[MatchingConfig] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize RoleMatcher.

        Args:
            library: Learned mapping library
            taxonomy: Curated role taxonomy
            config: Matching thresholds (defaults to MatchingConfig())
            logger_instance: Optional logger instance (defaults to module logger)
        """
        self.library = library
        self.taxonomy = taxonomy
        self.config = config or MatchingConfig()
        self.logger = logger_instance or logger

        self._tiers: List[Tuple[str, Callable[[str], Optional[MatchResult]]]] = [
            ("exact_library", self._match_exact_library),
            ("fuzzy_library", self._match_fuzzy_library),
            ("taxonomy", self._match_taxonomy),
        ]

    def match(self, title: str) -> MatchResult:
        """Resolve one title.

        Blank input returns the unmatched result without touching any store.
        A tier whose store raises PersistenceError is treated as having no
        result, so a failing store lowers match quality but never raises.

        Args:
            title: Raw title as found in the import

        Returns:
            MatchResult (match_type NONE with confidence 0 if nothing accepted)
        """
        if is_blank(title):
            return MatchResult.no_match(title or "")

        failed_tiers = []
        for tier_name, tier in self._tiers:
            try:
                result = tier(title)
            except PersistenceError as e:
                failed_tiers.append(tier_name)
                self.logger.warning(
                    f"Matching tier {tier_name} unavailable: {e}",
                    extra={
                        "event": "matching.tier.failed",
                        "tier": tier_name,
                        "error_type": type(e).__name__,
                    },
                )
                continue

            if result is not None:
                self.logger.debug(
                    "Title resolved",
                    extra={
                        "event": "matching.title.resolved",
                        "original_title": title,
                        "standardized_title": result.standardized_title,
                        "match_type": result.match_type.value,
                        "confidence": result.confidence,
                        "tier": tier_name,
                    },
                )
                return result

        self.logger.debug(
            "Title unmatched",
            extra={
                "event": "matching.title.unmatched",
                "original_title": title,
                "failed_tiers": failed_tiers,
            },
        )
        return MatchResult.no_match(title)

    def match_batch(
        self, titles: Iterable[str], max_workers: Optional[int] = None
    ) -> Dict[str, MatchResult]:
        """Resolve many titles independently.

        No deduplication or memoization: a literal repeated in the input runs
        the full cascade each time. Keys are the literal inputs in input order.

        Args:
            titles: Titles to resolve
            max_workers: Thread count; defaults to config.batch_workers.
                1 resolves sequentially.

        Returns:
            Dict mapping each input title to its MatchResult
        """
        titles = list(titles)
        workers = max_workers or self.config.batch_workers

        if workers <= 1 or len(titles) <= 1:
            results = [self.match(title) for title in titles]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # each task runs in a copy of the caller's context so log_context fields carry over
                futures = [
                    executor.submit(contextvars.copy_context().run, self.match, title)
                    for title in titles
                ]
                results = [future.result() for future in futures]

        matches: Dict[str, MatchResult] = {}
        for title, result in zip(titles, results):
            matches[title] = result

        counts = {match_type.value: 0 for match_type in MatchType}
        for result in results:
            counts[result.match_type.value] += 1

        self.logger.info(
            f"Resolved {len(titles)} titles",
            extra={
                "event": "matching.batch.completed",
                "title_count": len(titles),
                "workers": workers,
                **{f"{name}_count": count for name, count in counts.items()},
            },
        )
        return matches

    def _match_exact_library(self, title: str) -> Optional[MatchResult]:
        entry = self.library.find_exact(title)
        if entry is None:
            return None

        confidence = max(
            EXACT_MIN_CONFIDENCE, 100 - REPORTED_ISSUE_PENALTY * entry.reported_issue_count
        )
        if confidence < self.config.exact_accept_threshold:
            self.logger.info(
                "Exact library hit demoted to fuzzy scoring",
                extra={
                    "event": "matching.exact.demoted",
                    "library_key": entry.normalized_original_title,
                    "reported_issue_count": entry.reported_issue_count,
                    "confidence": confidence,
                },
            )
            return None

        return MatchResult(
            original_title=title,
            standardized_title=entry.standardized_title,
            seniority_level=entry.seniority_level,
            role_family=entry.role_family,
            confidence=confidence,
            match_type=MatchType.EXACT,
            matched_text=entry.normalized_original_title,
        )

    def _match_fuzzy_library(self, title: str) -> Optional[MatchResult]:
        match = self.library.fuzzy_find_best(title)
        if match is None:
            return None

        quality_bonus = min(match.entry.quality_score, QUALITY_BONUS_CAP)
        confidence = _clamp(
            _to_percent(match.score) + quality_bonus, FUZZY_MIN_CONFIDENCE, FUZZY_MAX_CONFIDENCE
        )

        return MatchResult(
            original_title=title,
            standardized_title=match.entry.standardized_title,
            seniority_level=match.entry.seniority_level,
            role_family=match.entry.role_family,
            confidence=confidence,
            match_type=MatchType.FUZZY,
            matched_text=match.entry.normalized_original_title,
        )

    def _match_taxonomy(self, title: str) -> Optional[MatchResult]:
        entry = self.taxonomy.find_by_alias(title)
        if entry is not None:
            return MatchResult(
                original_title=title,
                standardized_title=entry.canonical_title,
                seniority_level=entry.seniority_level,
                role_family=entry.role_family,
                confidence=TAXONOMY_EXACT_CONFIDENCE,
                match_type=MatchType.TAXONOMY,
                matched_text=normalize_title(title),
            )

        match = self.taxonomy.fuzzy_find_by_alias(title)
        if match is None:
            return None

        # the clamp floor doubles as the acceptance floor for this tier
        confidence = _clamp(
            _to_percent(match.score), TAXONOMY_FUZZY_MIN_CONFIDENCE, TAXONOMY_FUZZY_MAX_CONFIDENCE
        )

        return MatchResult(
            original_title=title,
            standardized_title=match.entry.canonical_title,
            seniority_level=match.entry.seniority_level,
            role_family=match.entry.role_family,
            confidence=confidence,
            match_type=MatchType.TAXONOMY,
            matched_text=match.alias,
        )

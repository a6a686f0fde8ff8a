"""Length-normalized edit-distance similarity.

Every fuzzy comparison in the standardizer (library titles, taxonomy aliases,
spreadsheet headers) goes through this module so that scores are comparable
across components.
"""

import math
from typing import Generic, Iterable, Optional, Tuple, TypeVar

from rapidfuzz.distance import Levenshtein

from standardizer.utils.text import normalize_title

DEFAULT_MAX_DISTANCE_RATIO = 0.5

T = TypeVar("T")


def similarity(a: str, b: str, max_distance_ratio: float = DEFAULT_MAX_DISTANCE_RATIO) -> float:
    """Score two strings in [0, 1] after case and whitespace normalization.

    The score is ``1 - levenshtein(a, b) / max(len(a), len(b))``. The search
    is bounded: a pair needing more than ``ceil(longest * max_distance_ratio)``
    edits scores 0.0, so longer inputs tolerate proportionally more edits.

    Args:
        a: First string
        b: Second string
        max_distance_ratio: Fraction of the longer length allowed as edits

    Returns:
        1.0 for identical (normalized) strings, 0.0 for maximally dissimilar

    Example:
        >>> similarity("Sales Rep", "sales  rep")
        1.0
        >>> similarity("", "")
        1.0
        >>> similarity("", "cto")
        0.0
    """
    left = normalize_title(a)
    right = normalize_title(b)

    if not left and not right:
        return 1.0
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0

    longest = max(len(left), len(right))
    max_distance = math.ceil(longest * max_distance_ratio)

    # rapidfuzz returns score_cutoff + 1 once the bound is exceeded
    distance = Levenshtein.distance(left, right, score_cutoff=max_distance)
    if distance > max_distance:
        return 0.0

    return 1.0 - distance / longest


class ScoredCandidate(Generic[T]):
    """Best candidate found by SimilarityScorer.best_match()."""

    __slots__ = ("item", "text", "score")

    def __init__(self, item: T, text: str, score: float):
        self.item = item
        self.text = text
        self.score = score

    def __repr__(self) -> str:
        return f"ScoredCandidate(text={self.text!r}, score={self.score:.3f})"


class SimilarityScorer:
    """Similarity function bound to a configured maximum search distance."""

    def __init__(self, max_distance_ratio: float = DEFAULT_MAX_DISTANCE_RATIO):
        """Initialize scorer.

        Args:
            max_distance_ratio: Fraction of the longer input length allowed as
                edits before the pair scores 0.0. Must be in (0, 1].

        Raises:
            ValueError: If the ratio is out of range
        """
        if not 0 < max_distance_ratio <= 1:
            raise ValueError(
                f"max_distance_ratio must be in (0, 1], got {max_distance_ratio}"
            )
        self.max_distance_ratio = max_distance_ratio

    def score(self, a: str, b: str) -> float:
        return similarity(a, b, self.max_distance_ratio)

    __call__ = score

    def best_match(
        self, query: str, candidates: Iterable[Tuple[T, str]]
    ) -> Optional[ScoredCandidate[T]]:
        """Find the highest scoring (item, text) pair for a query.

        Only a strictly higher score displaces the current best, so among
        equal scores the earliest candidate wins. Callers rely on this to
        express tie-break order through candidate order.

        Args:
            query: String to score
            candidates: Iterable of (item, text) pairs; text is what is scored

        Returns:
            ScoredCandidate for the best pair, or None if there are no
            candidates or every candidate scored 0.0
        """
        best: Optional[ScoredCandidate[T]] = None
        for item, text in candidates:
            score = self.score(query, text)
            if score > 0.0 and (best is None or score > best.score):
                best = ScoredCandidate(item, text, score)
                if score == 1.0:
                    break
        return best

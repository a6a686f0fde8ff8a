"""Fuzzy role title and header matching.

This module provides:
- similarity / SimilarityScorer: length-normalized edit-distance scoring
- RoleTaxonomy: exact and fuzzy alias lookup over the curated taxonomy
- RoleLibrary: learned, frequency-weighted mappings with feedback counters
- RoleMatcher: tiered cascade producing a MatchResult per title
- HeaderFieldMapper: greedy spreadsheet header to field assignment
- FeedbackLoop: best-effort write-back of confirmed mappings
"""

from .engine import RoleMatcher
from .feedback import FeedbackLoop
from .headers import DEFAULT_FIELD_SYNONYMS, HeaderFieldMapper, merge_synonyms
from .library import RoleLibrary
from .models import (
    HeaderAssignment,
    HeaderMappingResult,
    LibraryMatch,
    MatchResult,
    MatchType,
    TaxonomyMatch,
)
from .similarity import SimilarityScorer, similarity
from .stores import LibraryStore, TaxonomyStore
from .taxonomy import RoleTaxonomy

__all__ = [
    "similarity",
    "SimilarityScorer",
    "RoleTaxonomy",
    "RoleLibrary",
    "RoleMatcher",
    "HeaderFieldMapper",
    "FeedbackLoop",
    "DEFAULT_FIELD_SYNONYMS",
    "merge_synonyms",
    "MatchResult",
    "MatchType",
    "TaxonomyMatch",
    "LibraryMatch",
    "HeaderAssignment",
    "HeaderMappingResult",
    "TaxonomyStore",
    "LibraryStore",
]

"""Data models for import run tracking and reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List

from standardizer.matching.models import MatchType
from standardizer.normalization.models import NormalizedRow


def _empty_match_counts() -> Dict[str, int]:
    return {match_type.value: 0 for match_type in MatchType}


@dataclass
class ImportRunResult:
    """
    Results of importing one table.

    Attributes:
        import_id: Unique id of this run (also set as log context)
        source: File path or "<rows>" for in-memory input
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        review_threshold: Confidence below which a row needs review
        headers: Raw headers in column order
        header_mapping: Raw header -> canonical field id
        unmapped_headers: Headers without a field
        rows: Successfully normalized rows
        error_count: Rows that failed to normalize
        match_counts: Role match type -> number of rows
        confirmed_count: Mappings written back through the feedback loop
        confirm_failed_count: Write-backs that failed (logged, not raised)
        duration_seconds: Total time for the run
    """

    import_id: str
    source: str
    run_started_at: datetime
    run_finished_at: datetime
    review_threshold: int
    headers: List[str] = field(default_factory=list)
    header_mapping: Dict[str, str] = field(default_factory=dict)
    unmapped_headers: List[str] = field(default_factory=list)
    rows: List[NormalizedRow] = field(default_factory=list)
    error_count: int = 0
    match_counts: Dict[str, int] = field(default_factory=_empty_match_counts)
    confirmed_count: int = 0
    confirm_failed_count: int = 0
    duration_seconds: float = 0.0

    def __post_init__(self):
        if self.duration_seconds == 0.0:
            delta = self.run_finished_at - self.run_started_at
            self.duration_seconds = delta.total_seconds()

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def had_errors(self) -> bool:
        return self.error_count > 0

    @property
    def rows_needing_review(self) -> List[NormalizedRow]:
        return [row for row in self.rows if row.needs_review(self.review_threshold)]

    @property
    def review_count(self) -> int:
        return len(self.rows_needing_review)

    def summary(self) -> Dict:
        """Flat summary suitable for logging or JSON output."""
        return {
            "import_id": self.import_id,
            "source": self.source,
            "row_count": self.row_count,
            "error_count": self.error_count,
            "review_count": self.review_count,
            "confirmed_count": self.confirmed_count,
            "confirm_failed_count": self.confirm_failed_count,
            "header_mapping": dict(self.header_mapping),
            "unmapped_headers": list(self.unmapped_headers),
            "match_counts": dict(self.match_counts),
            "duration_seconds": round(self.duration_seconds, 3),
        }

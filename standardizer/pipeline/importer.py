"""Import pipeline for employee tables (CSV files or in-memory rows)."""

import csv
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union
from uuid import uuid4

from standardizer.config.models import ImportContextConfig
from standardizer.domain.models import ContextTag
from standardizer.logging import get_logger
from standardizer.logging.context import log_context
from standardizer.matching.engine import RoleMatcher
from standardizer.matching.feedback import FeedbackLoop
from standardizer.matching.headers import HeaderFieldMapper
from standardizer.normalization.service import RowNormalizer
from standardizer.utils.text import collapse_whitespace
from standardizer.utils.timestamps import utc_now

from .exceptions import ImportFileError
from .models import ImportRunResult

logger = get_logger(__name__, component="pipeline")

ROLE_FIELD = "role"
SNIFF_SAMPLE_SIZE = 8192
SUPPORTED_DELIMITERS = ",;"

Rows = Sequence[Mapping[str, Optional[str]]]


def read_csv_file(path: Union[str, Path]) -> Tuple[List[str], List[Dict[str, Optional[str]]]]:
    """Read a CSV file into headers and row dicts.

    UTF-8 with or without BOM. The delimiter is sniffed from the first
    lines (comma or semicolon) and defaults to comma.

    Raises:
        ImportFileError: If the file cannot be read or has no header row
    """
    csv_path = Path(path)
    try:
        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            sample = f.read(SNIFF_SAMPLE_SIZE)
            f.seek(0)

            try:
                dialect = csv.Sniffer().sniff(sample, delimiters=SUPPORTED_DELIMITERS)
                delimiter = dialect.delimiter
            except csv.Error:
                delimiter = ","

            reader = csv.DictReader(f, delimiter=delimiter)
            headers = list(reader.fieldnames or [])
            rows = [dict(row) for row in reader]

    except FileNotFoundError as e:
        raise ImportFileError(f"Import file not found: {csv_path}") from e
    except UnicodeDecodeError as e:
        raise ImportFileError(f"Import file {csv_path} is not valid UTF-8: {e}") from e
    except (OSError, csv.Error) as e:
        raise ImportFileError(f"Failed to read import file {csv_path}: {e}") from e

    if not headers:
        raise ImportFileError(f"Import file {csv_path} has no header row")

    return headers, rows


def _headers_from_rows(rows: Rows) -> List[str]:
    headers: List[str] = []
    seen = set()
    for row in rows:
        for header in row:
            if header not in seen:
                seen.add(header)
                headers.append(header)
    return headers


class ImportPipeline:
    """
    Runs one table through header mapping, role matching and normalization.

    Rows that fail are logged and counted; they never abort the run.
    Optionally, confident role matches are written back to the library so
    the next import benefits from them.
    """

    def __init__(
        self,
        header_mapper: HeaderFieldMapper,
        matcher: RoleMatcher,
        feedback: FeedbackLoop,
        import_context: Optional[ImportContextConfig] = None,
        review_threshold: int = 80,
        normalizer: Optional[RowNormalizer] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """
        Initialize the import pipeline.

        Args:
            header_mapper: Maps raw headers to canonical fields
            matcher: Resolves role titles
            feedback: Writes confirmed mappings back to the library
            import_context: Default context tags and auto-confirm threshold
            review_threshold: Confidence below which rows need review
            normalizer: Row normalizer (defaults to RowNormalizer(matcher))
            logger_instance: Logger instance (defaults to module logger)
        """
        self.header_mapper = header_mapper
        self.matcher = matcher
        self.feedback = feedback
        self.import_context = import_context or ImportContextConfig()
        self.review_threshold = review_threshold
        self.normalizer = normalizer or RowNormalizer(matcher)
        self.logger = logger_instance or logger

    def run(
        self,
        source: Union[str, Path, Rows],
        context: Optional[ContextTag] = None,
        auto_confirm_threshold: Optional[int] = None,
    ) -> ImportRunResult:
        """
        Import one table.

        This method:
        1. Reads the CSV file (or takes the given rows)
        2. Maps headers to canonical fields
        3. Resolves all role titles as a batch
        4. Normalizes each row inside a row_number log context
        5. Confirms matches at or above auto_confirm_threshold
           through the feedback loop

        Args:
            source: CSV path, or a sequence of header -> value mappings
            context: Context tags for learned mappings (defaults to the
                configured import context)
            auto_confirm_threshold: Overrides the configured threshold;
                None uses the configured one, which may itself be None
                (no auto-confirmation)

        Returns:
            ImportRunResult

        Raises:
            ImportFileError: If the file cannot be read
        """
        run_started_at = utc_now()
        import_id = uuid4().hex

        if isinstance(source, (str, Path)):
            source_label = str(source)
            headers, rows = read_csv_file(source)
        else:
            source_label = "<rows>"
            rows = [dict(row) for row in source]
            headers = _headers_from_rows(rows)

        if context is None:
            context = ContextTag(
                industry=self.import_context.industry,
                region=self.import_context.region,
                company_size=self.import_context.company_size,
            )
        threshold = (
            auto_confirm_threshold
            if auto_confirm_threshold is not None
            else self.import_context.auto_confirm_threshold
        )

        with log_context(import_id=import_id):
            self.logger.info(
                "Import run started",
                extra={
                    "event": "import.run.started",
                    "source": source_label,
                    "row_count": len(rows),
                    "header_count": len(headers),
                    "auto_confirm_threshold": threshold,
                },
            )

            mapping_result = self.header_mapper.map_headers_detailed(headers)
            header_mapping = mapping_result.mapping

            result = ImportRunResult(
                import_id=import_id,
                source=source_label,
                run_started_at=run_started_at,
                run_finished_at=run_started_at,
                review_threshold=self.review_threshold,
                headers=headers,
                header_mapping=header_mapping,
                unmapped_headers=list(mapping_result.unmapped),
            )

            role_header = next(
                (header for header, field_id in header_mapping.items() if field_id == ROLE_FIELD),
                None,
            )
            if role_header is None:
                self.logger.warning(
                    "No column mapped to role; titles will not be matched",
                    extra={"event": "import.role_column.missing"},
                )
                role_matches = {}
            else:
                titles = [collapse_whitespace(row.get(role_header)) for row in rows]
                role_matches = self.matcher.match_batch([title for title in titles if title])

            for row_number, row in enumerate(rows, start=1):
                with log_context(row_number=row_number):
                    self._process_row(row, row_number, header_mapping, role_header, role_matches, context, threshold, result)

            result.run_finished_at = utc_now()
            result.duration_seconds = (result.run_finished_at - run_started_at).total_seconds()

            self.logger.info(
                "Import run completed",
                extra={
                    "event": "import.run.completed",
                    "duration_ms": int(result.duration_seconds * 1000),
                    "row_count": result.row_count,
                    "error_count": result.error_count,
                    "review_count": result.review_count,
                    "confirmed_count": result.confirmed_count,
                    "confirm_failed_count": result.confirm_failed_count,
                    "unmapped_header_count": len(result.unmapped_headers),
                    **{f"{name}_count": count for name, count in result.match_counts.items()},
                },
            )

        return result

    def _process_row(
        self,
        row: Mapping[str, Optional[str]],
        row_number: int,
        header_mapping: Mapping[str, str],
        role_header: Optional[str],
        role_matches: Mapping,
        context: ContextTag,
        threshold: Optional[int],
        result: ImportRunResult,
    ) -> None:
        try:
            title = collapse_whitespace(row.get(role_header)) if role_header else ""
            normalized = self.normalizer.normalize(
                row,
                header_mapping,
                row_number=row_number,
                role_match=role_matches.get(title) if title else None,
            )
        except Exception as e:
            # Log error but continue with the remaining rows
            result.error_count += 1
            self.logger.error(
                f"Error normalizing row {row_number}: {e}",
                extra={
                    "event": "import.row.failed",
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            return

        result.rows.append(normalized)

        match = normalized.role_match
        if match is None:
            return
        result.match_counts[match.match_type.value] += 1

        if threshold is None or not match.is_match or match.confidence < threshold:
            return

        confirmed = self.feedback.confirm_mapping(
            normalized.role_title,
            match.standardized_title,
            seniority_level=match.seniority_level,
            role_family=match.role_family,
            industry=context.industry,
            region=context.region,
            company_size=context.company_size,
        )
        if confirmed:
            result.confirmed_count += 1
        else:
            result.confirm_failed_count += 1

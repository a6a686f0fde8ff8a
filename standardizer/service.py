"""Public entry point for callers that import and standardize role data.

StandardizationService bundles the matcher, header mapper, feedback loop and
import pipeline behind one object. build_service() wires it from an AppConfig
on top of the SQL stores, or on top of any stores passed in.
"""

from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Sequence, Union

from standardizer.config.models import AppConfig
from standardizer.domain.models import ContextTag
from standardizer.logging import get_logger
from standardizer.matching import (
    FeedbackLoop,
    HeaderFieldMapper,
    LibraryStore,
    MatchResult,
    RoleLibrary,
    RoleMatcher,
    RoleTaxonomy,
    SimilarityScorer,
    TaxonomyStore,
)
from standardizer.pipeline import ImportPipeline, ImportRunResult

logger = get_logger(__name__, component="service")


class StandardizationService:
    """Facade over role matching, header mapping and learning."""

    def __init__(
        self,
        matcher: RoleMatcher,
        header_mapper: HeaderFieldMapper,
        feedback: FeedbackLoop,
        import_pipeline: ImportPipeline,
    ):
        self.matcher = matcher
        self.header_mapper = header_mapper
        self.feedback = feedback
        self.import_pipeline = import_pipeline

    def match_role_title(self, title: str) -> MatchResult:
        return self.matcher.match(title)

    def match_role_titles_batch(self, titles: Iterable[str]) -> Dict[str, MatchResult]:
        return self.matcher.match_batch(titles)

    def confirm_mapping(
        self,
        original_title: str,
        standardized_title: str,
        seniority_level: Optional[str] = None,
        role_family: Optional[str] = None,
        industry: Optional[str] = None,
        region: Optional[str] = None,
        company_size: Optional[str] = None,
    ) -> bool:
        return self.feedback.confirm_mapping(
            original_title,
            standardized_title,
            seniority_level=seniority_level,
            role_family=role_family,
            industry=industry,
            region=region,
            company_size=company_size,
        )

    def mark_verified(self, original_title: str) -> bool:
        return self.feedback.mark_verified(original_title)

    def mark_reported(self, original_title: str) -> bool:
        return self.feedback.mark_reported(original_title)

    def map_headers(
        self,
        raw_headers: Iterable[str],
        field_synonyms: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> Dict[str, str]:
        return self.header_mapper.map_headers(raw_headers, field_synonyms)

    def import_table(
        self,
        source: Union[str, Path, Sequence[Mapping[str, Optional[str]]]],
        context: Optional[ContextTag] = None,
        auto_confirm_threshold: Optional[int] = None,
    ) -> ImportRunResult:
        """Run a CSV file or in-memory rows through the import pipeline."""
        return self.import_pipeline.run(
            source, context=context, auto_confirm_threshold=auto_confirm_threshold
        )


def build_service(
    app_config: Optional[AppConfig] = None,
    library_store: Optional[LibraryStore] = None,
    taxonomy_store: Optional[TaxonomyStore] = None,
) -> StandardizationService:
    """
    Wire a StandardizationService from configuration.

    Without explicit stores the SQL stores are used, which requires
    init_database() to have been called.

    Args:
        app_config: Application configuration (defaults to AppConfig())
        library_store: Library store handle (defaults to SqlLibraryStore)
        taxonomy_store: Taxonomy store handle (defaults to SqlTaxonomyStore)

    Returns:
        StandardizationService
    """
    config = app_config or AppConfig()

    if library_store is None or taxonomy_store is None:
        from standardizer.persistence.stores import SqlLibraryStore, SqlTaxonomyStore

        library_store = library_store or SqlLibraryStore()
        taxonomy_store = taxonomy_store or SqlTaxonomyStore()

    scorer = SimilarityScorer(config.matching.max_distance_ratio)
    library = RoleLibrary(library_store, scorer=scorer, fuzzy_floor=config.matching.library_fuzzy_floor)
    taxonomy = RoleTaxonomy(taxonomy_store, scorer=scorer, fuzzy_floor=config.matching.taxonomy_fuzzy_floor)
    matcher = RoleMatcher(library, taxonomy, config=config.matching)
    header_mapper = HeaderFieldMapper(
        scorer=scorer,
        acceptance_floor=config.headers.acceptance_floor,
        extra_synonyms=config.headers.extra_synonyms,
    )
    feedback = FeedbackLoop(library)
    import_pipeline = ImportPipeline(
        header_mapper,
        matcher,
        feedback,
        import_context=config.import_context,
        review_threshold=config.matching.review_threshold,
    )

    logger.debug(
        "Standardization service built",
        extra={
            "event": "service.built",
            "library_store": type(library_store).__name__,
            "taxonomy_store": type(taxonomy_store).__name__,
            "batch_workers": config.matching.batch_workers,
        },
    )
    return StandardizationService(matcher, header_mapper, feedback, import_pipeline)

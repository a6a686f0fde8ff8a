"""Data access layer (repositories) for persistence operations.

This module provides repository classes for the role taxonomy and the learned
role title library. Repositories encapsulate database operations and return
domain models rather than ORM models.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from standardizer.domain.models import ContextTag, ContextTags, LibraryEntry, TaxonomyEntry
from standardizer.utils.timestamps import format_timestamp

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import RoleLibraryModel, RoleTaxonomyModel

logger = logging.getLogger(__name__)

# Dialects that support INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class TaxonomyRepository:
    """Repository for the curated role taxonomy."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def list_all(self) -> List[TaxonomyEntry]:
        """Retrieve every taxonomy entry in insertion order.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(RoleTaxonomyModel).order_by(RoleTaxonomyModel.id.asc())
            result = self.session.execute(stmt)
            return [model.to_domain() for model in result.scalars().all()]

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving taxonomy entries: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve taxonomy entries: {e}") from e

    def count(self) -> int:
        """Number of taxonomy entries."""
        try:
            return self.session.execute(select(func.count(RoleTaxonomyModel.id))).scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Error counting taxonomy entries: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count taxonomy entries: {e}") from e

    def add_all(self, entries: Iterable[TaxonomyEntry]) -> int:
        """Insert entries in the given order.

        Returns:
            Number of inserted entries

        Raises:
            DataIntegrityError: On constraint violation
            PersistenceError: If database error occurs
        """
        try:
            models = [RoleTaxonomyModel.from_domain(entry) for entry in entries]
            self.session.add_all(models)
            self.session.flush()
            return len(models)

        except IntegrityError as e:
            logger.error(f"Integrity error inserting taxonomy entries: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to insert taxonomy entries: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting taxonomy entries: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert taxonomy entries: {e}") from e

    def delete_all(self) -> int:
        """Delete every taxonomy entry.

        Returns:
            Count of deleted records
        """
        try:
            result = self.session.execute(delete(RoleTaxonomyModel))
            self.session.flush()
            return result.rowcount

        except SQLAlchemyError as e:
            logger.error(f"Error clearing taxonomy: {e}", exc_info=True)
            raise PersistenceError(f"Failed to clear taxonomy: {e}") from e


class RoleLibraryRepository:
    """Repository for learned role title mappings."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get_by_key(self, key: str) -> Optional[LibraryEntry]:
        """Retrieve the entry for a normalized title.

        Args:
            key: Normalized original title

        Returns:
            LibraryEntry if found, None otherwise

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = self._get_model(key)
            return model.to_domain() if model else None

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving library entry {key!r}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve library entry: {e}") from e

    def list_by_frequency(self) -> List[LibraryEntry]:
        """Retrieve all entries, most frequently confirmed first.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(RoleLibraryModel).order_by(
                RoleLibraryModel.frequency.desc(), RoleLibraryModel.id.asc()
            )
            result = self.session.execute(stmt)
            return [model.to_domain() for model in result.scalars().all()]

        except SQLAlchemyError as e:
            logger.error(f"Error listing library entries: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list library entries: {e}") from e

    def count(self) -> int:
        """Number of library entries."""
        try:
            return self.session.execute(select(func.count(RoleLibraryModel.id))).scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Error counting library entries: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count library entries: {e}") from e

    def upsert(
        self,
        key: str,
        standardized_title: str,
        seniority_level: Optional[str],
        role_family: Optional[str],
        context_tag: Optional[ContextTag],
        seen_at: datetime,
    ) -> LibraryEntry:
        """Insert a new mapping or record another confirmation of an existing one.

        The frequency increment is a single INSERT ... ON CONFLICT DO UPDATE
        statement where the dialect supports it. Canonical values of an
        existing row are never overwritten. Context tags are merged in the
        same transaction, after the row is locked by the increment.

        Returns:
            The stored LibraryEntry after the write

        Raises:
            DataIntegrityError: On constraint violation
            PersistenceError: If database error occurs
        """
        seen_at_str = format_timestamp(seen_at)
        initial_tags = ContextTags.from_tag(context_tag)

        try:
            insert_fn = _UPSERT_INSERTS.get(self.session.get_bind().dialect.name)

            if insert_fn is not None:
                stmt = insert_fn(RoleLibraryModel).values(
                    normalized_original_title=key,
                    standardized_title=standardized_title,
                    seniority_level=seniority_level,
                    role_family=role_family,
                    frequency=1,
                    verified_count=0,
                    reported_issue_count=0,
                    industries=initial_tags.industries,
                    regions=initial_tags.regions,
                    company_sizes=initial_tags.company_sizes,
                    created_at=seen_at_str,
                    last_seen_at=seen_at_str,
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=[RoleLibraryModel.normalized_original_title],
                    set_={
                        "frequency": RoleLibraryModel.frequency + 1,
                        "last_seen_at": stmt.excluded.last_seen_at,
                    },
                )
                self.session.execute(stmt)
            else:
                self._upsert_portable(key, standardized_title, seniority_level, role_family, initial_tags, seen_at_str)

            model = self._get_model(key, refresh=True)
            if model is None:
                raise RecordNotFoundError(f"Library entry {key!r} missing after upsert")

            if context_tag is not None and not context_tag.is_empty:
                merged = _model_tags(model).merge(context_tag)
                model.industries = merged.industries
                model.regions = merged.regions
                model.company_sizes = merged.company_sizes
                self.session.flush()

            return model.to_domain()

        except IntegrityError as e:
            logger.error(f"Integrity error upserting library entry {key!r}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to upsert library entry due to constraint violation: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error upserting library entry {key!r}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to upsert library entry: {e}") from e

    def increment_verified(self, key: str) -> bool:
        """Atomically add one verification.

        Returns:
            True if the entry exists, False otherwise
        """
        return self._increment(key, RoleLibraryModel.verified_count)

    def increment_reported(self, key: str) -> bool:
        """Atomically add one reported issue.

        Returns:
            True if the entry exists, False otherwise
        """
        return self._increment(key, RoleLibraryModel.reported_issue_count)

    def _increment(self, key: str, column) -> bool:
        try:
            stmt = (
                update(RoleLibraryModel)
                .where(RoleLibraryModel.normalized_original_title == key)
                .values({column: column + 1})
                .execution_options(synchronize_session=False)
            )
            result = self.session.execute(stmt)
            self.session.flush()
            return result.rowcount > 0

        except SQLAlchemyError as e:
            logger.error(f"Error updating {column.key} for {key!r}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update {column.key}: {e}") from e

    def _upsert_portable(
        self,
        key: str,
        standardized_title: str,
        seniority_level: Optional[str],
        role_family: Optional[str],
        tags: ContextTags,
        seen_at_str: str,
    ) -> None:
        """Get-then-write upsert for dialects without ON CONFLICT support."""
        stmt = (
            update(RoleLibraryModel)
            .where(RoleLibraryModel.normalized_original_title == key)
            .values(frequency=RoleLibraryModel.frequency + 1, last_seen_at=seen_at_str)
            .execution_options(synchronize_session=False)
        )
        if self.session.execute(stmt).rowcount > 0:
            return

        self.session.add(
            RoleLibraryModel(
                normalized_original_title=key,
                standardized_title=standardized_title,
                seniority_level=seniority_level,
                role_family=role_family,
                frequency=1,
                verified_count=0,
                reported_issue_count=0,
                industries=tags.industries,
                regions=tags.regions,
                company_sizes=tags.company_sizes,
                created_at=seen_at_str,
                last_seen_at=seen_at_str,
            )
        )
        self.session.flush()

    def _get_model(self, key: str, refresh: bool = False) -> Optional[RoleLibraryModel]:
        stmt = (
            select(RoleLibraryModel)
            .where(RoleLibraryModel.normalized_original_title == key)
            .order_by(RoleLibraryModel.frequency.desc())
            .limit(1)
        )
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        return self.session.execute(stmt).scalars().first()


def _model_tags(model: RoleLibraryModel) -> ContextTags:
    return ContextTags(
        industries=model.industries or [],
        regions=model.regions or [],
        company_sizes=model.company_sizes or [],
    )

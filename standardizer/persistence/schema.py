"""Database schema definition and ORM models.

This module defines the two tables the matchers read from and the feedback
loop writes to, plus conversions between ORM rows and domain models:
- role_taxonomy: curated canonical roles, aliases stored as a JSON list
- role_title_library: learned mappings keyed by normalized_original_title
"""

import logging

from sqlalchemy import JSON, Column, Index, Integer, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from standardizer.domain.models import ContextTags, LibraryEntry, TaxonomyEntry
from standardizer.utils.timestamps import format_timestamp, parse_timestamp, utc_now

logger = logging.getLogger(__name__)

# Create base class for ORM models
Base = declarative_base()


class RoleTaxonomyModel(Base):
    """ORM model for role_taxonomy table.

    Row id order is the taxonomy's stable store order.
    """

    __tablename__ = "role_taxonomy"

    id = Column(Integer, primary_key=True, autoincrement=True)

    role_family = Column(String(100), nullable=False)
    canonical_title = Column(String(255), nullable=False)
    seniority_level = Column(String(20), nullable=False)
    aliases = Column(JSON, nullable=False, default=list)
    description = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_role_taxonomy_family", "role_family"),
        Index("idx_role_taxonomy_title_level", "canonical_title", "seniority_level"),
    )

    def to_domain(self) -> TaxonomyEntry:
        """Convert ORM model to domain model."""
        return TaxonomyEntry(
            role_family=self.role_family,
            canonical_title=self.canonical_title,
            seniority_level=self.seniority_level,
            aliases=self.aliases or [],
            description=self.description,
        )

    @classmethod
    def from_domain(cls, entry: TaxonomyEntry) -> "RoleTaxonomyModel":
        """Create ORM model from domain model."""
        return cls(
            role_family=entry.role_family,
            canonical_title=entry.canonical_title,
            seniority_level=entry.seniority_level,
            aliases=list(entry.aliases),
            description=entry.description,
        )


class RoleLibraryModel(Base):
    """ORM model for role_title_library table.

    Counters are only ever changed with in-database increments
    (``col = col + 1``) so concurrent writers never lose updates.
    """

    __tablename__ = "role_title_library"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Lookup key (lowercased, trimmed)
    normalized_original_title = Column(String(255), nullable=False, unique=True)

    # Canonical values, fixed by the first confirmation
    standardized_title = Column(String(255), nullable=False)
    seniority_level = Column(String(20), nullable=True)
    role_family = Column(String(100), nullable=True)

    # Counters
    frequency = Column(Integer, nullable=False, default=1)
    verified_count = Column(Integer, nullable=False, default=0)
    reported_issue_count = Column(Integer, nullable=False, default=0)

    # Context tag sets (JSON lists)
    industries = Column(JSON, nullable=False, default=list)
    regions = Column(JSON, nullable=False, default=list)
    company_sizes = Column(JSON, nullable=False, default=list)

    # Timestamps (stored as ISO 8601 strings)
    created_at = Column(String(50), nullable=False)
    last_seen_at = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_role_library_frequency", "frequency"),)

    def to_domain(self) -> LibraryEntry:
        """Convert ORM model to domain model."""
        return LibraryEntry(
            normalized_original_title=self.normalized_original_title,
            standardized_title=self.standardized_title,
            seniority_level=self.seniority_level,
            role_family=self.role_family,
            frequency=self.frequency,
            verified_count=self.verified_count,
            reported_issue_count=self.reported_issue_count,
            context_tags=ContextTags(
                industries=self.industries or [],
                regions=self.regions or [],
                company_sizes=self.company_sizes or [],
            ),
            last_seen_at=parse_timestamp(self.last_seen_at) or utc_now(),
        )

    @classmethod
    def from_domain(cls, entry: LibraryEntry) -> "RoleLibraryModel":
        """Create ORM model from domain model."""
        last_seen = format_timestamp(entry.last_seen_at)
        return cls(
            normalized_original_title=entry.normalized_original_title,
            standardized_title=entry.standardized_title,
            seniority_level=entry.seniority_level,
            role_family=entry.role_family,
            frequency=entry.frequency,
            verified_count=entry.verified_count,
            reported_issue_count=entry.reported_issue_count,
            industries=list(entry.context_tags.industries),
            regions=list(entry.context_tags.regions),
            company_sizes=list(entry.context_tags.company_sizes),
            created_at=last_seen,
            last_seen_at=last_seen,
        )


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent).

    Args:
        engine: SQLAlchemy engine instance
    """
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)

        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")

    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise

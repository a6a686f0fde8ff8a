"""Persistence layer for the role taxonomy and the learned mapping library.

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repositories (session-scoped) and stores (self-contained handles)
    - TaxonomyRepository, RoleLibraryRepository
    - SqlTaxonomyStore, SqlLibraryStore

    # Taxonomy seeding
    - load_taxonomy_seed(path=None) -> List[TaxonomyEntry]
    - seed_taxonomy(entries, replace=True) -> int

    # Exceptions
    - PersistenceError and its subclasses

Example usage:
    >>> from standardizer.persistence import init_database, SqlLibraryStore
    >>> init_database("sqlite:///./data/standardizer.db")
    >>> SqlLibraryStore().get("sales rep")
"""

# Database initialization and session management
from .database import close_database, get_engine, get_session, init_database

# Exceptions
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)

# Repository classes and store handles
from .repositories import RoleLibraryRepository, TaxonomyRepository
from .seed import DEFAULT_TAXONOMY_PATH, check_unique_aliases, load_taxonomy_seed, seed_taxonomy
from .stores import SqlLibraryStore, SqlTaxonomyStore

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    # Repositories and stores
    "TaxonomyRepository",
    "RoleLibraryRepository",
    "SqlTaxonomyStore",
    "SqlLibraryStore",
    # Seeding
    "DEFAULT_TAXONOMY_PATH",
    "load_taxonomy_seed",
    "seed_taxonomy",
    "check_unique_aliases",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]

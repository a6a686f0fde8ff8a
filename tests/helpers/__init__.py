"""Test helper utilities for role standardizer tests."""

from .stores import (
    FailingStore,
    InMemoryLibraryStore,
    InMemoryTaxonomyStore,
    make_library_entry,
    make_taxonomy_entry,
)

__all__ = [
    "InMemoryTaxonomyStore",
    "InMemoryLibraryStore",
    "FailingStore",
    "make_library_entry",
    "make_taxonomy_entry",
]

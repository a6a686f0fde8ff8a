"""Domain models for the role standardizer."""

from .models import ContextTag, ContextTags, LibraryEntry, SeniorityLevel, TaxonomyEntry

__all__ = ["SeniorityLevel", "TaxonomyEntry", "ContextTag", "ContextTags", "LibraryEntry"]

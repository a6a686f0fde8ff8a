"""Shared fixtures for role standardizer tests."""

import logging

import pytest

from standardizer.logging.config import ContextualFilter
from standardizer.logging.context import clear_log_context
from standardizer.persistence.database import close_database, init_database


@pytest.fixture(autouse=True)
def clean_logging_state():
    """Clear log context and drop handlers installed by configure_logging()."""
    root_logger = logging.getLogger()
    level = root_logger.level
    clear_log_context()

    yield

    clear_log_context()
    for handler in list(root_logger.handlers):
        if any(isinstance(f, ContextualFilter) for f in handler.filters):
            root_logger.removeHandler(handler)
    root_logger.setLevel(level)


@pytest.fixture
def memory_database():
    """In-memory SQLite database, closed after the test."""
    init_database("sqlite:///:memory:")
    yield
    close_database()


@pytest.fixture
def file_database(tmp_path):
    """File-backed SQLite database, needed for multi-connection tests."""
    db_url = f"sqlite:///{tmp_path / 'standardizer.db'}"
    init_database(db_url)
    yield db_url
    close_database()

"""Persistence layer exceptions.

Every store and repository failure surfaces as a PersistenceError subclass.
The matchers treat any of them as "this tier has no result", and the
feedback loop logs them and moves on.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Database could not be initialized or reached.

    Examples:
    - Invalid database URL
    - Database file not accessible
    - get_session() called before init_database()
    """

    pass


class RecordNotFoundError(PersistenceError):
    """A record that must exist was not found.

    Optional lookups return None instead of raising this.
    """

    pass


class DataIntegrityError(PersistenceError):
    """Stored or seed data violates a constraint.

    Examples:
    - Unique constraint violation on normalized_original_title
    - The same alias claimed by two taxonomy entries in seed data
    """

    pass

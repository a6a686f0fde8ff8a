"""Learning loop that writes confirmed mappings back into the library.

All writes here are best-effort. A failed write is logged and reported
through the boolean return value; it never propagates into the import or
save operation that triggered it.
"""

import logging
from typing import Optional

from standardizer.domain.models import ContextTag
from standardizer.logging import get_logger
from standardizer.persistence.exceptions import PersistenceError
from standardizer.utils.text import is_blank

from .library import RoleLibrary

logger = get_logger(__name__, component="feedback")


class FeedbackLoop:
    """Records confirmations, verifications and issue reports."""

    def __init__(self, library: RoleLibrary, logger_instance: Optional[logging.Logger] = None):
        self.library = library
        self.logger = logger_instance or logger

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
        """Record that original_title was confirmed as standardized_title.

        Returns:
            True if the library write succeeded, False if it was skipped or
            failed
        """
        if is_blank(original_title) or is_blank(standardized_title):
            self.logger.warning(
                "Skipping confirmation with blank title",
                extra={
                    "event": "feedback.confirm.skipped",
                    "original_title": original_title,
                    "standardized_title": standardized_title,
                },
            )
            return False

        context_tag = ContextTag(industry=industry, region=region, company_size=company_size)

        try:
            self.library.upsert(
                original_title,
                standardized_title,
                seniority_level=seniority_level,
                role_family=role_family,
                context_tag=None if context_tag.is_empty else context_tag,
            )
        except PersistenceError as e:
            self.logger.error(
                f"Failed to record mapping confirmation: {e}",
                extra={
                    "event": "feedback.confirm.failed",
                    "original_title": original_title,
                    "error_type": type(e).__name__,
                },
            )
            return False

        return True

    def mark_verified(self, original_title: str) -> bool:
        """Record a user verification of the stored mapping."""
        return self._record("verify", original_title)

    def mark_reported(self, original_title: str) -> bool:
        """Record a user-reported issue with the stored mapping."""
        return self._record("report", original_title)

    def _record(self, action: str, original_title: str) -> bool:
        if is_blank(original_title):
            return False

        try:
            if action == "verify":
                return self.library.verify(original_title)
            return self.library.report(original_title)
        except PersistenceError as e:
            self.logger.error(
                f"Failed to record {action} feedback: {e}",
                extra={
                    "event": f"feedback.{action}.failed",
                    "original_title": original_title,
                    "error_type": type(e).__name__,
                },
            )
            return False

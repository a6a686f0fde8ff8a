"""Pre-validation checks that produce warnings rather than errors."""

import warnings
from typing import Any, Dict, Iterable, List


def check_for_warnings(
    config_dict: Dict[str, Any], known_fields: Iterable[str] = ()
) -> List[str]:
    """
    Check a raw configuration for settings that are legal but suspicious.

    Args:
        config_dict: Raw configuration dictionary
        known_fields: Canonical header field ids; extra synonyms for other
            ids are reported

    Returns:
        List of warning messages
    """
    warning_messages = []

    matching = config_dict.get("matching", {})
    if isinstance(matching, dict):
        for key in ("library_fuzzy_floor", "taxonomy_fuzzy_floor"):
            value = matching.get(key)
            if isinstance(value, (int, float)) and value > 0.95:
                warning_messages.append(
                    f"matching.{key} = {value} effectively disables fuzzy matching"
                )
            if isinstance(value, (int, float)) and 0 < value < 0.5:
                warning_messages.append(
                    f"matching.{key} = {value} will accept very loose matches"
                )

        workers = matching.get("batch_workers")
        if isinstance(workers, int) and workers > 8:
            warning_messages.append(
                f"matching.batch_workers = {workers} may exhaust the database connection pool"
            )

    headers = config_dict.get("headers", {})
    known = set(known_fields)
    if isinstance(headers, dict) and known:
        extra = headers.get("extra_synonyms", {})
        if isinstance(extra, dict):
            for field_id in sorted(extra):
                if field_id not in known:
                    warning_messages.append(
                        f"headers.extra_synonyms defines unknown field '{field_id}'; "
                        "it will be added as a new mapping target"
                    )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages using Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)

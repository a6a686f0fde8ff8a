"""Loading and seeding the curated role taxonomy.

The taxonomy ships as a YAML file inside the package. Seeding replaces the
role_taxonomy table in one transaction; the matchers never write to it.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml
from pydantic import ValidationError

from standardizer.domain.models import TaxonomyEntry
from standardizer.logging import get_logger
from standardizer.utils.text import normalize_title

from .database import get_session
from .exceptions import DataIntegrityError
from .repositories import TaxonomyRepository

logger = get_logger(__name__, component="seed")

DEFAULT_TAXONOMY_PATH = Path(__file__).resolve().parent.parent / "data" / "role_taxonomy.yaml"


def load_taxonomy_seed(path: Optional[Path] = None) -> List[TaxonomyEntry]:
    """Read and validate taxonomy entries from YAML.

    The file holds a top-level ``entries`` list (a bare list is accepted
    too). Each item is validated as a TaxonomyEntry.

    Args:
        path: YAML file (defaults to the bundled role_taxonomy.yaml)

    Returns:
        Entries in file order

    Raises:
        DataIntegrityError: If the file is malformed, an entry is invalid, or
            one alias is claimed by two entries
    """
    seed_path = path or DEFAULT_TAXONOMY_PATH

    try:
        with open(seed_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise DataIntegrityError(f"Failed to read taxonomy seed {seed_path}: {e}") from e

    items = raw.get("entries") if isinstance(raw, dict) else raw
    if not isinstance(items, list):
        raise DataIntegrityError(
            f"Taxonomy seed {seed_path} must contain a list of entries under 'entries'"
        )

    entries = []
    for index, item in enumerate(items):
        try:
            entries.append(TaxonomyEntry.model_validate(item))
        except ValidationError as e:
            raise DataIntegrityError(f"Invalid taxonomy entry #{index + 1} in {seed_path}: {e}") from e

    check_unique_aliases(entries)

    logger.debug(
        f"Loaded {len(entries)} taxonomy entries",
        extra={"event": "taxonomy.seed.loaded", "path": str(seed_path), "entry_count": len(entries)},
    )
    return entries


def check_unique_aliases(entries: Sequence[TaxonomyEntry]) -> None:
    """Reject data where one alias (case-insensitively) belongs to two entries.

    Raises:
        DataIntegrityError: Listing every conflicting alias
    """
    owners: Dict[str, TaxonomyEntry] = {}
    conflicts = []

    for entry in entries:
        for alias in entry.aliases:
            key = normalize_title(alias)
            owner = owners.get(key)
            if owner is None:
                owners[key] = entry
            elif owner is not entry:
                conflicts.append(
                    f"'{alias}' used by {owner.canonical_title} ({owner.seniority_level}) "
                    f"and {entry.canonical_title} ({entry.seniority_level})"
                )

    if conflicts:
        raise DataIntegrityError("Duplicate taxonomy aliases: " + "; ".join(conflicts))


def seed_taxonomy(entries: Sequence[TaxonomyEntry], replace: bool = True) -> int:
    """Write taxonomy entries to the database in one transaction.

    Args:
        entries: Entries to insert, in store order
        replace: Delete existing entries first

    Returns:
        Number of inserted entries

    Raises:
        DataIntegrityError: If the entries have duplicate aliases
        PersistenceError: If the database write fails
    """
    check_unique_aliases(entries)

    with get_session() as session:
        repo = TaxonomyRepository(session)
        if replace:
            deleted = repo.delete_all()
        else:
            deleted = 0
            check_unique_aliases([*repo.list_all(), *entries])
        inserted = repo.add_all(entries)

    logger.info(
        f"Seeded {inserted} taxonomy entries",
        extra={
            "event": "taxonomy.seed.completed",
            "inserted_count": inserted,
            "deleted_count": deleted,
            "replace": replace,
        },
    )
    return inserted

"""Spreadsheet header to canonical field mapping.

Headers are assigned greedily from left to right. Each header takes the
best-scoring field still available and removes it from the pool, so an
earlier header wins contention for a field even with a weaker score. The
assignment is intentionally not globally optimal.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from standardizer.logging import get_logger
from standardizer.utils.text import is_blank, normalize_title

from .models import HeaderAssignment, HeaderMappingResult
from .similarity import SimilarityScorer

logger = get_logger(__name__, component="headers")

DEFAULT_ACCEPTANCE_FLOOR = 0.5

# Multilingual synonyms (EN, DE, FR, ES, IT, PT) per canonical field id
DEFAULT_FIELD_SYNONYMS: Dict[str, List[str]] = {
    "firstName": [
        "first name", "firstname", "given name", "vorname",
        "prénom", "nombre", "nome",
    ],
    "lastName": [
        "last name", "lastname", "family name", "surname", "nachname",
        "nom de famille", "apellido", "cognome",
    ],
    "employeeName": [
        "name", "employee", "employee name", "full name", "fullname",
        "mitarbeiter", "name des mitarbeiters",
        "nom", "nombre completo", "nome completo",
    ],
    "email": [
        "email", "e-mail", "mail", "email address",
        "e-mail-adresse", "email-adresse",
        "correo electrónico", "correio eletrônico",
    ],
    "department": [
        "department", "dept", "team", "division", "unit",
        "abteilung", "bereich",
        "département", "departamento", "dipartimento",
    ],
    "role": [
        "role", "position", "title", "job title", "job",
        "stelle", "beruf", "rolle",
        "poste", "puesto", "função", "ruolo",
    ],
    "level": [
        "level", "grade", "seniority", "career level",
        "stufe", "ebene", "niveau", "nivel", "livello",
    ],
    "employmentType": [
        "employment type", "type", "contract type", "status",
        "anstellungsart", "beschäftigungsart", "typ",
        "type de contrat", "tipo de empleo",
    ],
    "totalCompensation": [
        "total compensation", "total comp", "tc", "compensation", "total pay",
        "gesamtkosten", "gesamtvergütung", "kosten", "gesamt",
        "rémunération totale", "compensación total",
    ],
    "baseSalary": [
        "base salary", "salary", "base", "annual salary", "base pay",
        "fixgehalt", "grundgehalt", "gehalt", "basis",
        "salaire de base", "salario base",
    ],
    "bonus": [
        "bonus", "variable pay", "incentive", "commission",
        "prämie", "variable vergütung",
        "prime", "bonificación",
    ],
    "equityValue": [
        "equity", "stock", "equity value", "stock value", "options",
        "aktien", "beteiligung", "eigenkapital",
        "actions", "acciones",
    ],
    "startDate": [
        "start date", "hire date", "joining date", "employment start",
        "startdatum", "einstellungsdatum", "beginn",
        "date de début", "fecha de inicio",
    ],
    "location": [
        "location", "office", "city", "site", "workplace",
        "standort", "ort", "büro",
        "lieu", "ubicación", "località",
    ],
    "fteFactor": [
        "fte", "fte factor", "full time equivalent", "hours",
        "arbeitszeitfaktor", "wöchentliche arbeitszeit", "arbeitszeit",
        "équivalent temps plein",
    ],
}


def merge_synonyms(
    base: Mapping[str, Sequence[str]], extra: Optional[Mapping[str, Sequence[str]]]
) -> Dict[str, List[str]]:
    """Merge extra synonyms into a base table.

    Existing fields keep their order with new synonyms appended; unknown
    field ids are added at the end. Duplicates are dropped case-insensitively.
    """
    merged: Dict[str, List[str]] = {field_id: list(synonyms) for field_id, synonyms in base.items()}
    for field_id, synonyms in (extra or {}).items():
        current = merged.setdefault(field_id, [])
        seen = {normalize_title(s) for s in current}
        for synonym in synonyms:
            key = normalize_title(synonym)
            if key and key not in seen:
                seen.add(key)
                current.append(synonym)
    return merged


class HeaderFieldMapper:
    """Maps raw spreadsheet headers to canonical field ids."""

    def __init__(
        self,
        field_synonyms: Optional[Mapping[str, Sequence[str]]] = None,
        scorer: Optional[SimilarityScorer] = None,
        acceptance_floor: float = DEFAULT_ACCEPTANCE_FLOOR,
        extra_synonyms: Optional[Mapping[str, Sequence[str]]] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize HeaderFieldMapper.

        Args:
            field_synonyms: Field id -> synonyms table (defaults to
                DEFAULT_FIELD_SYNONYMS)
            scorer: Similarity scorer (defaults to SimilarityScorer())
            acceptance_floor: A header is assigned only when its best score
                is strictly above this value
            extra_synonyms: Additional synonyms merged into the table
            logger_instance: Optional logger (defaults to module logger)
        """
        base = field_synonyms if field_synonyms is not None else DEFAULT_FIELD_SYNONYMS
        self.field_synonyms = merge_synonyms(base, extra_synonyms)
        self.scorer = scorer or SimilarityScorer()
        self.acceptance_floor = acceptance_floor
        self.logger = logger_instance or logger

    def map_headers(
        self,
        raw_headers: Iterable[str],
        field_synonyms: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> Dict[str, str]:
        """Map headers to field ids; see map_headers_detailed()."""
        return self.map_headers_detailed(raw_headers, field_synonyms).mapping

    def map_headers_detailed(
        self,
        raw_headers: Iterable[str],
        field_synonyms: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> HeaderMappingResult:
        """Assign each header to at most one field, left to right.

        Each field is assigned at most once per run. Blank headers and
        repeated occurrences of an already-seen header are left unmapped.

        Args:
            raw_headers: Headers in their original column order
            field_synonyms: Optional table overriding the configured one for
                this call

        Returns:
            HeaderMappingResult with assignments and unmapped headers
        """
        synonyms = field_synonyms if field_synonyms is not None else self.field_synonyms
        available = dict(synonyms)
        result = HeaderMappingResult()
        seen_headers = set()

        for header in raw_headers:
            if is_blank(header) or header in seen_headers:
                result.unmapped.append(header)
                continue
            seen_headers.add(header)

            candidates = (
                (field_id, synonym)
                for field_id, field_synonyms_list in available.items()
                for synonym in field_synonyms_list
            )
            best = self.scorer.best_match(header, candidates)

            if best is None or best.score <= self.acceptance_floor:
                result.unmapped.append(header)
                continue

            result.assignments.append(
                HeaderAssignment(header=header, field_id=best.item, synonym=best.text, score=best.score)
            )
            del available[best.item]

        self.logger.info(
            f"Mapped {len(result.assignments)} of {len(result.assignments) + len(result.unmapped)} headers",
            extra={
                "event": "headers.mapped",
                "mapped_count": len(result.assignments),
                "unmapped_count": len(result.unmapped),
                "unmapped_headers": result.unmapped,
            },
        )
        return result

"""Keyword heuristics for role titles and department names.

These are rough guesses used to pre-fill review suggestions for titles the
matcher could not resolve. They never override a MatchResult.
"""

import re
from functools import lru_cache
from typing import Optional, Sequence, Tuple

from standardizer.domain.models import SeniorityLevel
from standardizer.utils.text import collapse_whitespace

# Checked in order; the first level with a matching keyword wins
SENIORITY_KEYWORDS: Tuple[Tuple[SeniorityLevel, Sequence[str]], ...] = (
    (SeniorityLevel.C_LEVEL, ("chief", "ceo", "cto", "cfo", "coo", "cpo", "geschäftsführer")),
    (SeniorityLevel.VP, ("vp", "vice president")),
    (SeniorityLevel.DIRECTOR, ("director", "direktor")),
    (SeniorityLevel.LEAD, ("head of", "lead", "leiter", "leiterin")),
    (SeniorityLevel.STAFF, ("principal", "staff")),
    (SeniorityLevel.SENIOR, ("senior", "sr")),
    (SeniorityLevel.MID, ("mid", "mid-level", "intermediate")),
    (SeniorityLevel.JUNIOR, ("junior", "jr", "werkstudent", "praktikum", "intern")),
)

DEFAULT_SENIORITY = SeniorityLevel.MID

SENIORITY_PREFIXES: Sequence[str] = (
    "chief", "c-level", "vice president", "vp",
    "director", "head of", "lead", "principal", "staff",
    "senior", "sr", "mid-level", "mid", "intermediate",
    "junior", "jr",
    "geschäftsführer", "leiterin", "leiter",
)

# Checked in order; the first family with a matching keyword wins
ROLE_FAMILY_KEYWORDS: Tuple[Tuple[str, Sequence[str]], ...] = (
    ("Engineering", (
        "engineer", "developer", "dev", "software", "frontend", "backend",
        "fullstack", "full stack", "tech", "data scientist", "devops", "qa",
        "entwickler",
    )),
    ("Product", ("product", "pm", "designer", "ux", "ui")),
    ("Sales", (
        "sales", "account executive", "ae", "sdr", "bdr", "business development",
        "partnership", "revenue", "vertrieb",
    )),
    ("Marketing", ("marketing", "growth", "content", "brand", "communications")),
    ("Customer Success", ("customer success", "csm", "support", "customer")),
    ("People & Culture", ("people", "hr", "human resources", "talent", "recruiting", "recruiter")),
    ("Finance", ("finance", "accounting", "financial", "cfo", "controller", "finanzen")),
    ("Operations", ("operations", "ops", "coo", "operational")),
    ("Legal", ("legal", "counsel", "attorney", "rechts")),
    ("Sustainability", ("sustainability", "climate", "wald", "trees", "klimaförster")),
    ("Leadership", ("ceo", "chief", "c-level", "geschäftsführer")),
)

DEPARTMENT_ALIASES = {
    "tech": "Engineering",
    "dev": "Engineering",
    "engineering": "Engineering",
    "entwicklung": "Engineering",
    "cs": "Customer Success",
    "customer success": "Customer Success",
    "support": "Customer Success",
    "sales": "Sales",
    "vertrieb": "Sales",
    "revenue": "Sales",
    "marketing": "Marketing",
    "product": "Product",
    "people": "People & Culture",
    "hr": "People & Culture",
    "talent": "People & Culture",
    "finance": "Finance",
    "finanzen": "Finance",
    "operations": "Operations",
    "ops": "Operations",
    "sustainability": "Sustainability",
    "trees": "Sustainability",
    "wald": "Sustainability",
    "ceo": "Leadership",
    "leadership": "Leadership",
    "executive": "Leadership",
}

# Keywords this short only match as whole words ("ae" must not hit "michael")
_WHOLE_WORD_MAX_LEN = 4


@lru_cache(maxsize=None)
def _keyword_pattern(keyword: str) -> re.Pattern:
    escaped = re.escape(keyword)
    if len(keyword) <= _WHOLE_WORD_MAX_LEN:
        # "sr" also matches "sr." and "jr" matches "jr."
        return re.compile(rf"(?<!\w){escaped}(?!\w)")
    return re.compile(escaped)


def _contains_any(text: str, keywords: Sequence[str]) -> bool:
    return any(_keyword_pattern(keyword).search(text) for keyword in keywords)


def extract_seniority_level(title: Optional[str]) -> str:
    """Guess the seniority level from keywords in a title.

    Example:
        >>> extract_seniority_level("Sr. Backend Engineer")
        'Senior'
        >>> extract_seniority_level("Backend Engineer")
        'Mid'
    """
    lower = collapse_whitespace(title).lower()
    for level, keywords in SENIORITY_KEYWORDS:
        if _contains_any(lower, keywords):
            return level.value
    return DEFAULT_SENIORITY.value


def strip_seniority(title: Optional[str]) -> str:
    """Remove seniority words from a title.

    Returns the original title when nothing would be left.

    Example:
        >>> strip_seniority("Senior Software Engineer")
        'Software Engineer'
    """
    if not title:
        return ""

    stripped = title
    for prefix in SENIORITY_PREFIXES:
        stripped = re.sub(rf"(?<!\w){re.escape(prefix)}\.?(?!\w)", "", stripped, flags=re.IGNORECASE)

    stripped = collapse_whitespace(stripped.replace(" ,", ","))
    return stripped or title


def classify_role_family(title: Optional[str]) -> Optional[str]:
    """Guess the role family from keywords in a title.

    Returns:
        Role family name, or None when no keyword matches
    """
    lower = collapse_whitespace(title).lower()
    if not lower:
        return None

    for family, keywords in ROLE_FAMILY_KEYWORDS:
        if _contains_any(lower, keywords):
            return family
    return None


def standardize_department(department: Optional[str]) -> Optional[str]:
    """Map common (multilingual) department names to a role family.

    Unknown names are returned unchanged (whitespace collapsed).
    """
    cleaned = collapse_whitespace(department)
    if not cleaned:
        return None
    return DEPARTMENT_ALIASES.get(cleaned.lower(), cleaned)


def merge_names(first_name: Optional[str], last_name: Optional[str]) -> Optional[str]:
    """Join first and last name; None when both are blank."""
    merged = collapse_whitespace(f"{first_name or ''} {last_name or ''}")
    return merged or None

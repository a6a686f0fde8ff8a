"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class MatchingConfig(BaseModel):
    """Role title matching thresholds."""

    max_distance_ratio: float = Field(
        0.5,
        gt=0.0,
        le=1.0,
        description="Edits allowed as a fraction of the longer string before similarity is 0",
    )
    library_fuzzy_floor: float = Field(
        0.70, ge=0.0, le=1.0, description="Minimum similarity for a fuzzy library hit"
    )
    taxonomy_fuzzy_floor: float = Field(
        0.75, ge=0.0, le=1.0, description="Minimum similarity for a fuzzy taxonomy alias hit"
    )
    exact_accept_threshold: int = Field(
        90,
        ge=85,
        le=100,
        description="Minimum confidence for an exact library hit to win without re-scoring",
    )
    review_threshold: int = Field(
        80, ge=0, le=100, description="Results below this confidence are flagged for review"
    )
    batch_workers: int = Field(
        1, ge=1, le=32, description="Threads used to resolve batches (1 = sequential)"
    )


class HeaderConfig(BaseModel):
    """Spreadsheet header mapping settings."""

    acceptance_floor: float = Field(
        0.5, ge=0.0, lt=1.0, description="A header maps only when its best score exceeds this"
    )
    extra_synonyms: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Additional synonyms per field id, merged into the built-in dictionary",
    )

    @field_validator("extra_synonyms")
    @classmethod
    def normalize_synonyms(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        """Strip whitespace, lowercase and drop empty synonyms and fields."""
        normalized = {}
        for field_id, synonyms in v.items():
            field_id = field_id.strip()
            cleaned = []
            for synonym in synonyms:
                stripped = synonym.strip().lower()
                if stripped and stripped not in cleaned:
                    cleaned.append(stripped)
            if field_id and cleaned:
                normalized[field_id] = cleaned
        return normalized


class ImportContextConfig(BaseModel):
    """Context tags attached to mappings learned during imports."""

    industry: Optional[str] = Field(None, description="Industry of the importing organization")
    region: Optional[str] = Field("EU", description="Region of the importing organization")
    company_size: Optional[str] = Field(None, description="Company size bucket, e.g. '51-200'")
    auto_confirm_threshold: Optional[int] = Field(
        None,
        ge=0,
        le=100,
        description="Confirm matches into the library automatically at or above this confidence",
    )

    @field_validator("industry", "region", "company_size")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AppConfig(BaseModel):
    """Root configuration object for the role standardizer."""

    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    headers: HeaderConfig = Field(default_factory=HeaderConfig)
    import_context: ImportContextConfig = Field(default_factory=ImportContextConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def validate_thresholds(self):
        """Auto-confirmation must never learn results that still need review."""
        auto = self.import_context.auto_confirm_threshold
        if auto is not None and auto < self.matching.review_threshold:
            raise ValueError(
                f"auto_confirm_threshold ({auto}) must not be below "
                f"review_threshold ({self.matching.review_threshold}); "
                "results needing review would be learned automatically"
            )
        return self

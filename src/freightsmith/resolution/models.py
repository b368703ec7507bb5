"""Data models for header resolution and resolved units."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..dictionary.models import MappingCandidate
from ..quality.models import AuditRecord


class Origin(str, Enum):
    """Which resolution layer produced a mapping."""

    KNOWN_FORMAT = "known_format"
    DICTIONARY = "dictionary"
    AI_FALLBACK = "ai_fallback"
    AI_FALLBACK_FAILED = "ai_fallback_failed"
    UNMAPPED = "unmapped"


class FieldResolution(BaseModel):
    """Outcome for one input header."""

    header: str
    canonical_field: Optional[str] = None
    confidence: float = 0.0
    origin: Origin = Origin.UNMAPPED
    note: Optional[str] = None

    @property
    def is_mapped(self) -> bool:
        return self.canonical_field is not None


class UnmappedFieldInsight(BaseModel):
    """What is known about a header that could not be mapped."""

    header: str
    reason: str  # "no_suggestion", "unknown_field", "duplicate", "low_confidence", "fallback_failed"
    potential_meaning: Optional[str] = None
    suggested_canonical_field: Optional[str] = None
    confidence_score: float = 0.0
    data_type: Optional[str] = None


class ResolutionResult(BaseModel):
    """Header resolution for one import."""

    column_mapping: dict[str, str] = Field(default_factory=dict)  # header -> canonical field
    per_field_confidence: dict[str, float] = Field(default_factory=dict)
    resolutions: list[FieldResolution] = Field(default_factory=list)
    overall_confidence: float = 0.0
    forwarder_name: Optional[str] = None
    format_id: Optional[str] = None
    unmapped_field_insights: list[UnmappedFieldInsight] = Field(default_factory=list)
    learning_candidates: list[MappingCandidate] = Field(default_factory=list)
    learned_count: int = 0
    reused_count: int = 0  # dictionary entries whose usage was recorded
    ignored_headers: list[str] = Field(default_factory=list)

    @property
    def unmapped_headers(self) -> list[str]:
        return [r.header for r in self.resolutions if not r.is_mapped]

    def resolution_for(self, header: str) -> Optional[FieldResolution]:
        for resolution in self.resolutions:
            if resolution.header == header:
                return resolution
        return None


class ResolvedField(BaseModel):
    """One canonical value of a resolved unit."""

    model_config = ConfigDict(frozen=True)

    value: Any = None
    original_value: Any = None
    source_header: str
    confidence: float
    origin: Origin


class ResolvedImportUnit(BaseModel):
    """Canonical projection of one raw row."""

    model_config = ConfigDict(frozen=True)

    row_index: int
    fields: dict[str, ResolvedField] = Field(default_factory=dict)
    unmapped: dict[str, Any] = Field(default_factory=dict)  # header -> raw value

    def get(self, canonical_field: str, default: Any = None) -> Any:
        """Get the coerced value of a canonical field."""
        resolved = self.fields.get(canonical_field)
        if resolved is None or resolved.value is None:
            return default
        return resolved.value

    @property
    def unit_ref(self) -> Optional[str]:
        value = self.get("container_number")
        return str(value) if value else None

    def audit_record(self) -> AuditRecord:
        """Summarize this unit's field coverage for quality scoring."""
        confidences = [f.confidence for f in self.fields.values()]
        return AuditRecord(
            total_fields=len(self.fields) + len(self.unmapped),
            unmapped_count=len(self.unmapped),
            confidence=sum(confidences) / len(confidences) if confidences else 0.0,
            unmapped_fields=list(self.unmapped),
            unit_ref=self.unit_ref,
        )

"""Data models for import quality scoring."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class QualityGrade(str, Enum):
    """Capture-rate grade of one import."""

    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    NEEDS_IMPROVEMENT = "NEEDS_IMPROVEMENT"
    POOR = "POOR"

    @classmethod
    def from_capture_rate(cls, capture_rate: float) -> "QualityGrade":
        if capture_rate >= 0.90:
            return cls.EXCELLENT
        if capture_rate >= 0.75:
            return cls.GOOD
        if capture_rate >= 0.60:
            return cls.NEEDS_IMPROVEMENT
        return cls.POOR


class AuditRecord(BaseModel):
    """Per-unit field coverage, as recorded after an import."""

    total_fields: int = Field(ge=0)
    unmapped_count: int = Field(default=0, ge=0)
    confidence: float = 0.0
    unmapped_fields: list[str] = Field(default_factory=list)
    unit_ref: Optional[str] = None  # usually the container number

    @property
    def capture_rate(self) -> float:
        if self.total_fields == 0:
            return 0.0
        mapped = max(self.total_fields - self.unmapped_count, 0)
        return mapped / self.total_fields


class QualityTiers(BaseModel):
    """How many units fell into each grade."""

    excellent: int = 0
    good: int = 0
    needs_improvement: int = 0
    poor: int = 0


class ImportQualityReport(BaseModel):
    """Aggregate data quality of one import."""

    total_units: int = 0
    total_fields: int = 0
    mapped_fields: int = 0
    unmapped_field_names: list[str] = Field(default_factory=list)
    avg_confidence: float = 0.0
    capture_rate: float = 0.0
    min_capture_rate: float = 0.0
    max_capture_rate: float = 0.0
    grade: QualityGrade = QualityGrade.NEEDS_IMPROVEMENT
    recommend_improvement: bool = False
    tiers: QualityTiers = Field(default_factory=QualityTiers)

"""Data models for import runs and improvement runs."""

from typing import Optional

from pydantic import BaseModel, Field

from ..quality.models import ImportQualityReport
from ..resolution.models import ResolutionResult, ResolvedImportUnit


class ImportOutcome(BaseModel):
    """Everything produced by one import run."""

    import_id: str
    resolution: ResolutionResult
    units: list[ResolvedImportUnit] = Field(default_factory=list)
    quality: ImportQualityReport


class PendingSuggestion(BaseModel):
    """A fallback suggestion kept for human review."""

    header: str
    suggested_canonical_field: Optional[str] = None
    confidence: float
    potential_meaning: Optional[str] = None


class ImprovementOutcome(BaseModel):
    """Result of re-analyzing an import's unmapped headers."""

    import_id: str
    recommend_improvement: bool
    analyzed: int = 0
    saved: int = 0
    pending: list[PendingSuggestion] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)

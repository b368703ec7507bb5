"""Data models for import and risk history."""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..quality.models import ImportQualityReport
from ..risk.models import DemurrageStatus, RiskMode


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class ImportNotFoundError(Exception):
    """Exception raised when an import record does not exist."""

    pass


class ImportRecord(BaseModel):
    """A completed import run."""

    id: str
    file_name: Optional[str] = None
    format_id: Optional[str] = None
    forwarder_name: Optional[str] = None
    overall_confidence: float = 0.0
    total_units: int = 0
    column_mapping: dict[str, str] = Field(default_factory=dict)
    unmapped_headers: list[str] = Field(default_factory=list)
    sample_rows: list[dict[str, Any]] = Field(default_factory=list)  # kept for improvement runs
    quality: Optional[ImportQualityReport] = None
    created_at: datetime = Field(default_factory=_utc_now)


class RiskSnapshot(BaseModel):
    """A point-in-time risk assessment of one unit (audit only)."""

    id: Optional[int] = None
    unit_ref: str
    mode: RiskMode
    demurrage_status: DemurrageStatus
    demurrage_total: float = 0.0
    assessment: dict[str, Any] = Field(default_factory=dict)
    recorded_at: datetime = Field(default_factory=_utc_now)

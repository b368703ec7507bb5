"""Data models for unit risk assessment."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..resolution.models import ResolvedImportUnit


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class RiskMode(str, Enum):
    """Lifecycle mode of a unit."""

    COMPLETE = "COMPLETE"
    RISK_DETENTION = "RISK_DETENTION"
    ACTIVE = "ACTIVE"
    RISK_MONITOR = "RISK_MONITOR"
    TRANSIT = "TRANSIT"


class DemurrageStatus(str, Enum):
    """Exposure status against the last free day."""

    SAFE = "safe"
    WARNING = "warning"
    CRITICAL = "critical"
    OVERDUE = "overdue"
    UNKNOWN = "unknown"


class Demurrage(BaseModel):
    """Computed demurrage or detention exposure."""

    total: float = 0.0
    days_overdue: int = 0
    daily_rate: float
    status: DemurrageStatus = DemurrageStatus.UNKNOWN


class RiskAssessment(BaseModel):
    """Director output for one unit at one point in time."""

    mode: RiskMode
    headline: str
    summary: str
    theme_color: str  # emerald, red, blue, amber, slate
    show_risk_card: bool
    show_actions: bool
    requires_action: bool
    progress_step: int
    lfd_valid: bool
    demurrage: Demurrage
    evaluated_at: datetime = Field(default_factory=_utc_now)


class UnitSnapshot(BaseModel):
    """
    The dates and status the Director reads from a unit.

    Values may be datetimes, ISO strings, or Excel serials; they are parsed
    at evaluation time. A milestone that is recorded but unparseable still
    moves the unit through the lifecycle, but carries no date.
    """

    unit_ref: Optional[str] = None
    last_free_day: Any = None
    gate_out_date: Any = None
    empty_return_date: Any = None
    port_arrival_date: Any = None
    estimated_arrival: Any = None
    current_status: Optional[str] = None
    status_last_updated: Any = None

    @classmethod
    def from_resolved_unit(cls, unit: ResolvedImportUnit) -> "UnitSnapshot":
        status = unit.get("event_status")
        return cls(
            unit_ref=unit.unit_ref,
            last_free_day=unit.get("last_free_day"),
            gate_out_date=unit.get("gate_out_date"),
            empty_return_date=unit.get("empty_return_date"),
            port_arrival_date=unit.get("port_arrival_date"),
            estimated_arrival=unit.get("estimated_arrival_pod"),
            current_status=str(status) if status is not None else None,
            status_last_updated=unit.get("event_date"),
        )

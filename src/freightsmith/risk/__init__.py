"""Unit risk state machine."""

from .models import RiskMode, DemurrageStatus, Demurrage, RiskAssessment, UnitSnapshot
from .director import RiskStateMachine

__all__ = [
    "RiskMode",
    "DemurrageStatus",
    "Demurrage",
    "RiskAssessment",
    "UnitSnapshot",
    "RiskStateMachine",
]

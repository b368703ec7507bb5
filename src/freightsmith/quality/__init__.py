"""Import data quality scoring."""

from .models import AuditRecord, QualityGrade, QualityTiers, ImportQualityReport
from .scorer import QualityScorer

__all__ = [
    "AuditRecord",
    "QualityGrade",
    "QualityTiers",
    "ImportQualityReport",
    "QualityScorer",
]

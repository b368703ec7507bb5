"""Import-level data quality scoring."""

import logging
from typing import Iterable

from .models import AuditRecord, ImportQualityReport, QualityGrade, QualityTiers

logger = logging.getLogger(__name__)

IMPROVEMENT_THRESHOLD = 0.90


class QualityScorer:
    """
    Grades an import by how many of its raw fields were captured.

    Every unit weighs the same regardless of its field count, so one wide
    row cannot mask many poorly mapped narrow ones.
    """

    def score(self, audit_records: Iterable[AuditRecord]) -> ImportQualityReport:
        records = list(audit_records)
        if not records:
            logger.info("No audit records to score; returning default report")
            return ImportQualityReport()

        rates = [record.capture_rate for record in records]
        capture_rate = sum(rates) / len(rates)

        unmapped_names: list[str] = []
        seen: set[str] = set()
        for record in records:
            for name in record.unmapped_fields:
                if name not in seen:
                    seen.add(name)
                    unmapped_names.append(name)

        tiers = QualityTiers()
        for rate in rates:
            grade = QualityGrade.from_capture_rate(rate)
            if grade == QualityGrade.EXCELLENT:
                tiers.excellent += 1
            elif grade == QualityGrade.GOOD:
                tiers.good += 1
            elif grade == QualityGrade.NEEDS_IMPROVEMENT:
                tiers.needs_improvement += 1
            else:
                tiers.poor += 1

        total_fields = sum(record.total_fields for record in records)
        mapped_fields = sum(
            max(record.total_fields - record.unmapped_count, 0) for record in records
        )

        report = ImportQualityReport(
            total_units=len(records),
            total_fields=total_fields,
            mapped_fields=mapped_fields,
            unmapped_field_names=unmapped_names,
            avg_confidence=sum(record.confidence for record in records) / len(records),
            capture_rate=capture_rate,
            min_capture_rate=min(rates),
            max_capture_rate=max(rates),
            grade=QualityGrade.from_capture_rate(capture_rate),
            recommend_improvement=capture_rate < IMPROVEMENT_THRESHOLD,
            tiers=tiers,
        )
        logger.info(
            f"Scored {report.total_units} units: capture {capture_rate:.1%} ({report.grade.value})"
        )
        return report

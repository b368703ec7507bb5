"""Tests for import quality scoring."""

import pytest

from freightsmith.quality import AuditRecord, QualityGrade, QualityScorer


def _record(total, unmapped, names=(), confidence=0.9):
    return AuditRecord(
        total_fields=total,
        unmapped_count=unmapped,
        confidence=confidence,
        unmapped_fields=list(names),
    )


class TestQualityGrade:
    """Test grade thresholds."""

    @pytest.mark.parametrize(
        "rate,grade",
        [
            (1.0, QualityGrade.EXCELLENT),
            (0.90, QualityGrade.EXCELLENT),
            (0.899999, QualityGrade.GOOD),
            (0.75, QualityGrade.GOOD),
            (0.60, QualityGrade.NEEDS_IMPROVEMENT),
            (0.5999, QualityGrade.POOR),
            (0.0, QualityGrade.POOR),
        ],
    )
    def test_boundaries(self, rate, grade):
        """Test each bound is inclusive."""
        assert QualityGrade.from_capture_rate(rate) == grade


class TestQualityScorer:
    """Test report aggregation."""

    def test_capture_rate_is_unweighted_mean(self):
        """Test every unit counts equally regardless of field count."""
        report = QualityScorer().score([_record(100, 0), _record(2, 2)])

        assert report.capture_rate == pytest.approx(0.5)
        assert report.total_fields == 102
        assert report.mapped_fields == 100
        assert report.grade == QualityGrade.POOR
        assert report.recommend_improvement is True

    def test_excellent_import_needs_no_improvement(self):
        """Test 0.90 capture does not recommend improvement."""
        report = QualityScorer().score([_record(10, 1)])

        assert report.capture_rate == pytest.approx(0.9)
        assert report.grade == QualityGrade.EXCELLENT
        assert report.recommend_improvement is False

    def test_zero_field_record_counts_as_zero(self):
        """Test a record without fields has capture rate 0, not an error."""
        report = QualityScorer().score([_record(0, 0), _record(4, 0)])

        assert report.capture_rate == pytest.approx(0.5)
        assert report.min_capture_rate == 0.0
        assert report.max_capture_rate == 1.0

    def test_unmapped_names_are_deduplicated_in_order(self):
        """Test unmapped names keep first-seen order without repeats."""
        report = QualityScorer().score(
            [
                _record(5, 2, ["Remarks", "Trip"]),
                _record(5, 2, ["Trip", "Broker"]),
                _record(5, 1, ["Remarks"]),
            ]
        )

        assert report.unmapped_field_names == ["Remarks", "Trip", "Broker"]

    def test_tiers_and_average_confidence(self):
        """Test per-grade tier counts and the mean confidence."""
        report = QualityScorer().score(
            [
                _record(10, 0, confidence=1.0),
                _record(4, 1, confidence=0.8),
                _record(10, 4, confidence=0.6),
                _record(10, 9, confidence=0.2),
            ]
        )

        assert report.total_units == 4
        assert report.tiers.excellent == 1
        assert report.tiers.good == 1
        assert report.tiers.needs_improvement == 1
        assert report.tiers.poor == 1
        assert report.avg_confidence == pytest.approx(0.65)

    def test_no_records_gives_default_report(self):
        """Test an empty import still produces a well-defined report."""
        report = QualityScorer().score([])

        assert report.total_units == 0
        assert report.capture_rate == 0.0
        assert report.grade == QualityGrade.NEEDS_IMPROVEMENT
        assert report.recommend_improvement is False
        assert report.unmapped_field_names == []

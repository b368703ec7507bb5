"""Tests for the import pipeline and improvement loop."""

import pytest

from freightsmith.history import ImportNotFoundError
from freightsmith.pipeline import ImportService, ImprovementPlanner
from freightsmith.quality import QualityGrade
from freightsmith.resolution import FallbackUnavailableError, FieldResolver, Origin
from freightsmith.risk import RiskMode, UnitSnapshot


@pytest.fixture
def make_service(dictionary_store, history_store):
    """Factory for an import service with a given fallback."""
    def _make(fallback=None):
        resolver = FieldResolver(dictionary_store=dictionary_store, fallback=fallback)
        return ImportService(dictionary_store, history_store, resolver=resolver)
    return _make


class TestImportService:
    """Test end-to-end imports."""

    @pytest.mark.asyncio
    async def test_standard_import(self, make_service, make_fallback, standard_rows):
        """Test a standard export resolves fully and is recorded."""
        service = make_service(make_fallback())
        headers = list(standard_rows[0].keys())

        outcome = await service.run_import(headers, standard_rows, file_name="standard.xlsx")

        assert outcome.resolution.format_id == "standard_container_export_v1"
        assert len(outcome.units) == 2
        assert outcome.quality.capture_rate == 1.0
        assert outcome.quality.grade == QualityGrade.EXCELLENT

        record = await service.history_store.get_import(outcome.import_id)
        assert record.file_name == "standard.xlsx"
        assert record.total_units == 2

    @pytest.mark.asyncio
    async def test_import_learns_and_reports_unmapped(self, make_service, make_fallback, dictionary_store):
        """Test fallback learning and unmapped headers flow into the report."""
        fallback = make_fallback({"Boat": ("vessel", 0.95)})
        service = make_service(fallback)
        rows = [{"Boat": "EVER GIVEN", "Mystery": "?"}, {"Boat": "MSC OSCAR", "Mystery": "?"}]

        outcome = await service.run_import(["Boat", "Mystery"], rows)

        assert outcome.resolution.learned_count == 1
        assert outcome.quality.capture_rate == pytest.approx(0.5)
        assert outcome.quality.unmapped_field_names == ["Mystery"]
        assert outcome.quality.recommend_improvement is True
        snapshot = await dictionary_store.load_all()
        assert snapshot.lookup("boat").canonical_field == "vessel"

    @pytest.mark.asyncio
    async def test_quality_report_recomputed(self, make_service, make_fallback):
        """Test the stored audits reproduce the import's report."""
        service = make_service(make_fallback())
        outcome = await service.run_import(["Mystery"], [{"Mystery": 1}])

        report = await service.quality_report(outcome.import_id)

        assert report == outcome.quality

    @pytest.mark.asyncio
    async def test_quality_report_unknown_import(self, make_service):
        """Test unknown imports raise ImportNotFoundError."""
        with pytest.raises(ImportNotFoundError):
            await make_service().quality_report("missing")

    @pytest.mark.asyncio
    async def test_fallback_failure_does_not_abort_import(self, make_service, make_fallback):
        """Test a raising fallback still produces a recorded import."""
        service = make_service(make_fallback(error=RuntimeError("down")))

        outcome = await service.run_import(["Boat"], [{"Boat": "x"}])

        assert outcome.resolution.resolutions[0].origin == Origin.AI_FALLBACK_FAILED
        assert outcome.quality.capture_rate == 0.0

    @pytest.mark.asyncio
    async def test_evaluate_unit_records_snapshot(self, make_service):
        """Test evaluations are appended to the unit's history."""
        service = make_service()
        unit = UnitSnapshot(unit_ref="MSCU1234567", current_status="DIS")

        assessment = await service.evaluate_unit(unit)

        assert assessment.mode == RiskMode.RISK_MONITOR
        snapshots = await service.history_store.get_risk_snapshots("MSCU1234567")
        assert len(snapshots) == 1

    @pytest.mark.asyncio
    async def test_evaluate_unit_without_recording(self, make_service):
        """Test record=False leaves history untouched."""
        service = make_service()
        await service.evaluate_unit(UnitSnapshot(unit_ref="X1"), record=False)

        assert await service.history_store.get_risk_snapshots("X1") == []


class TestImprovementPlanner:
    """Test the improvement loop."""

    @pytest.mark.asyncio
    async def test_graduates_saves_and_pends(self, make_service, make_fallback, dictionary_store, history_store):
        """Test suggestions are saved, pended or skipped by confidence."""
        service = make_service(make_fallback())
        rows = [{"Boat": "A", "Trip": "1", "Broker": "B", "Junk": "?"}]
        outcome = await service.run_import(["Boat", "Trip", "Broker", "Junk"], rows)

        planner = ImprovementPlanner(
            dictionary_store,
            history_store,
            fallback=make_fallback(
                {"Boat": ("vessel", 0.95), "Trip": ("voyage", 0.75), "Broker": ("customs_broker", 0.8)}
            ),
        )
        result = await planner.improve(outcome.import_id)

        assert result.recommend_improvement is True
        assert result.analyzed == 4
        assert result.saved == 1
        assert [p.header for p in result.pending] == ["Trip", "Broker"]
        assert result.skipped == ["Junk"]
        snapshot = await dictionary_store.load_all()
        assert snapshot.lookup("boat").canonical_field == "vessel"

    @pytest.mark.asyncio
    async def test_excellent_import_is_skipped(self, make_service, make_fallback, dictionary_store, history_store, standard_rows):
        """Test imports that need no improvement are left alone."""
        service = make_service(make_fallback())
        outcome = await service.run_import(list(standard_rows[0].keys()), standard_rows)
        fallback = make_fallback()

        result = await ImprovementPlanner(dictionary_store, history_store, fallback=fallback).improve(
            outcome.import_id
        )

        assert result.recommend_improvement is False
        assert result.analyzed == 0
        assert fallback.calls == []

    @pytest.mark.asyncio
    async def test_missing_fallback_is_unavailable(self, make_service, make_fallback, dictionary_store, history_store):
        """Test improving without a fallback raises FallbackUnavailableError."""
        service = make_service(make_fallback())
        outcome = await service.run_import(["Mystery"], [{"Mystery": 1}])

        with pytest.raises(FallbackUnavailableError):
            await ImprovementPlanner(dictionary_store, history_store).improve(outcome.import_id)

    @pytest.mark.asyncio
    async def test_unknown_import(self, dictionary_store, history_store):
        """Test unknown imports raise ImportNotFoundError."""
        with pytest.raises(ImportNotFoundError):
            await ImprovementPlanner(dictionary_store, history_store).improve("missing")

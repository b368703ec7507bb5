"""Import pipeline: resolve, project, learn, audit, score."""

import logging
import uuid
from typing import Optional, Union

from ..config import settings
from ..dictionary.storage import DictionaryStore
from ..history.models import ImportNotFoundError, ImportRecord
from ..history.store import HistoryStore
from ..quality.models import ImportQualityReport
from ..quality.scorer import QualityScorer
from ..resolution.models import ResolvedImportUnit
from ..resolution.resolver import FieldResolver
from ..risk.director import RiskStateMachine
from ..risk.models import RiskAssessment, UnitSnapshot
from .models import ImportOutcome

logger = logging.getLogger(__name__)


class ImportService:
    """Runs imports end to end and answers questions about past ones."""

    def __init__(
        self,
        dictionary_store: DictionaryStore,
        history_store: HistoryStore,
        resolver: Optional[FieldResolver] = None,
        scorer: Optional[QualityScorer] = None,
        director: Optional[RiskStateMachine] = None,
    ):
        self.dictionary_store = dictionary_store
        self.history_store = history_store
        self.resolver = resolver or FieldResolver(dictionary_store=dictionary_store)
        self.scorer = scorer or QualityScorer()
        self.director = director or RiskStateMachine()

    async def run_import(
        self,
        headers: list[str],
        rows: list[dict],
        file_name: Optional[str] = None,
    ) -> ImportOutcome:
        """Resolve and score one import, learning from it along the way."""
        import_id = str(uuid.uuid4())
        logger.info(f"Starting import {import_id} ({file_name or 'unnamed'}, {len(rows)} rows)")

        snapshot = await self.dictionary_store.load_all()
        samples = rows[: settings.fallback_sample_rows]
        resolution = await self.resolver.resolve(headers, samples, snapshot)

        units = self.resolver.build_units(resolution, rows)
        audits = [unit.audit_record() for unit in units]
        quality = self.scorer.score(audits)

        await self.history_store.record_import(
            ImportRecord(
                id=import_id,
                file_name=file_name,
                format_id=resolution.format_id,
                forwarder_name=resolution.forwarder_name,
                overall_confidence=resolution.overall_confidence,
                total_units=len(units),
                column_mapping=resolution.column_mapping,
                unmapped_headers=resolution.unmapped_headers,
                sample_rows=samples,
                quality=quality,
            )
        )
        await self.history_store.record_unit_audits(import_id, audits)

        logger.info(
            f"Import {import_id} complete: {len(units)} units, grade {quality.grade.value}"
        )
        return ImportOutcome(
            import_id=import_id, resolution=resolution, units=units, quality=quality
        )

    async def quality_report(self, import_id: str) -> ImportQualityReport:
        """Recompute an import's quality report from its stored audits."""
        record = await self.history_store.get_import(import_id)
        if record is None:
            raise ImportNotFoundError(f"Import {import_id} not found")
        audits = await self.history_store.get_unit_audits(import_id)
        return self.scorer.score(audits)

    async def evaluate_unit(
        self,
        unit: Union[UnitSnapshot, ResolvedImportUnit],
        unit_ref: Optional[str] = None,
        record: bool = True,
    ) -> RiskAssessment:
        """Evaluate a unit now, optionally appending the result to its history."""
        assessment = self.director.evaluate(unit)
        ref = unit_ref or unit.unit_ref
        if record and ref:
            await self.history_store.record_risk_snapshot(ref, assessment)
        return assessment

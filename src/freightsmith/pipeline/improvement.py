"""Improvement loop: re-ask the fallback about headers an import left unmapped."""

import asyncio
import logging
from typing import Optional

from ..config import settings
from ..dictionary.models import MappingCandidate
from ..dictionary.storage import DictionaryStore
from ..fields import is_canonical
from ..history.models import ImportNotFoundError
from ..history.store import HistoryStore
from ..quality.scorer import QualityScorer
from ..resolution.fallback import AIFallbackResolver, FallbackUnavailableError
from .models import ImprovementOutcome, PendingSuggestion

logger = logging.getLogger(__name__)


class ImprovementPlanner:
    """
    Graduates fallback suggestions for an import's unmapped headers.

    Suggestions for registered fields at or above the dictionary threshold
    are saved; anything else at or above the pending threshold is reported
    for review.
    """

    def __init__(
        self,
        dictionary_store: DictionaryStore,
        history_store: HistoryStore,
        fallback: Optional[AIFallbackResolver] = None,
        scorer: Optional[QualityScorer] = None,
        save_threshold: Optional[float] = None,
        pending_threshold: Optional[float] = None,
        timeout: Optional[float] = None,
    ):
        self.dictionary_store = dictionary_store
        self.history_store = history_store
        self.fallback = fallback
        self.scorer = scorer or QualityScorer()
        self.save_threshold = (
            settings.dictionary_confidence_threshold if save_threshold is None else save_threshold
        )
        self.pending_threshold = (
            settings.pending_confidence_threshold if pending_threshold is None else pending_threshold
        )
        self.timeout = settings.fallback_timeout_seconds if timeout is None else timeout

    async def improve(self, import_id: str, force: bool = False) -> ImprovementOutcome:
        """Run the improvement loop for one import."""
        record = await self.history_store.get_import(import_id)
        if record is None:
            raise ImportNotFoundError(f"Import {import_id} not found")

        report = self.scorer.score(await self.history_store.get_unit_audits(import_id))
        outcome = ImprovementOutcome(
            import_id=import_id, recommend_improvement=report.recommend_improvement
        )

        if not report.recommend_improvement and not force:
            logger.info(f"Import {import_id} does not need improvement ({report.grade.value})")
            return outcome

        headers = report.unmapped_field_names
        if not headers:
            return outcome
        if self.fallback is None:
            raise FallbackUnavailableError("No fallback resolver configured")

        try:
            result = await asyncio.wait_for(
                self.fallback.suggest(headers, record.sample_rows), timeout=self.timeout
            )
        except FallbackUnavailableError:
            raise
        except Exception as e:
            raise FallbackUnavailableError(f"Fallback failed: {e}") from e

        candidates: list[MappingCandidate] = []
        for header in headers:
            suggestion = result.suggestions.get(header)
            if suggestion is None:
                outcome.skipped.append(header)
                continue

            canonical = suggestion.suggested_canonical_field
            if is_canonical(canonical) and suggestion.confidence >= self.save_threshold:
                candidates.append(
                    MappingCandidate(
                        raw_header=header,
                        canonical_field=canonical,
                        confidence=suggestion.confidence,
                    )
                )
            elif suggestion.confidence >= self.pending_threshold:
                outcome.pending.append(
                    PendingSuggestion(
                        header=header,
                        suggested_canonical_field=canonical,
                        confidence=suggestion.confidence,
                        potential_meaning=suggestion.potential_meaning,
                    )
                )
            else:
                outcome.skipped.append(header)

        outcome.analyzed = len(headers)
        outcome.saved = await self.dictionary_store.batch_upsert(candidates, self.save_threshold)

        logger.info(
            f"Improvement for import {import_id}: {outcome.saved} saved, "
            f"{len(outcome.pending)} pending, {len(outcome.skipped)} skipped"
        )
        return outcome

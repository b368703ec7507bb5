"""Per-import header resolution: known format, then dictionary, then AI fallback."""

import asyncio
import logging
from typing import Any, Optional

from ..config import settings
from ..dictionary.models import DictionarySnapshot, MappingCandidate
from ..dictionary.storage import DictionaryStore
from ..fields import coerce_value, is_canonical
from ..formats.models import KnownFormatDefinition, normalize_header
from ..formats.registry import KnownFormatRegistry
from .fallback import AIFallbackResolver, FallbackResult
from .models import (
    FieldResolution,
    Origin,
    ResolutionResult,
    ResolvedField,
    ResolvedImportUnit,
    UnmappedFieldInsight,
)

logger = logging.getLogger(__name__)


class FieldResolver:
    """
    Resolves an import's headers to canonical fields.

    Layers are applied in passes over all headers, so a field claimed by a
    higher-precedence layer is never claimed again by a lower one; within a
    layer the earlier column wins. The dictionary snapshot is supplied by the
    caller and is not reloaded during a resolution.
    """

    def __init__(
        self,
        registry: Optional[KnownFormatRegistry] = None,
        dictionary_store: Optional[DictionaryStore] = None,
        fallback: Optional[AIFallbackResolver] = None,
        learning_threshold: Optional[float] = None,
        fallback_timeout: Optional[float] = None,
    ):
        self.registry = registry or KnownFormatRegistry()
        self.dictionary_store = dictionary_store
        self.fallback = fallback
        self.learning_threshold = (
            settings.dictionary_confidence_threshold
            if learning_threshold is None
            else learning_threshold
        )
        self.fallback_timeout = (
            settings.fallback_timeout_seconds if fallback_timeout is None else fallback_timeout
        )

    async def resolve(
        self,
        headers: list[str],
        sample_rows: list[dict],
        snapshot: DictionarySnapshot,
    ) -> ResolutionResult:
        """Resolve every header of one import."""
        headers = [h for h in (headers or []) if isinstance(h, str)]
        sample_rows = sample_rows or []

        ignored = [h for h in headers if not normalize_header(h)]
        columns = [h for h in headers if normalize_header(h)]

        resolved: dict[int, FieldResolution] = {}
        insights: list[UnmappedFieldInsight] = []
        claimed: dict[str, str] = {}  # canonical field -> header

        def claim(index: int, canonical: str, confidence: float, origin: Origin, note=None):
            header = columns[index]
            if canonical in claimed:
                resolved[index] = FieldResolution(
                    header=header, origin=Origin.UNMAPPED, note=f"duplicate of '{claimed[canonical]}'"
                )
                insights.append(
                    UnmappedFieldInsight(
                        header=header,
                        reason="duplicate",
                        suggested_canonical_field=canonical,
                        confidence_score=confidence,
                        potential_meaning=f"Same field as '{claimed[canonical]}'",
                    )
                )
                return
            claimed[canonical] = header
            resolved[index] = FieldResolution(
                header=header,
                canonical_field=canonical,
                confidence=confidence,
                origin=origin,
                note=note,
            )

        # 1. Known format
        match = self.registry.match(columns)
        known = match.format if match.is_known_format else None
        if known is not None:
            for index, header in enumerate(columns):
                canonical = self.registry.resolve_header(known, header)
                if canonical:
                    claim(index, canonical, match.confidence, Origin.KNOWN_FORMAT, note=known.id)

        # 2. Dictionary snapshot
        reused: list[MappingCandidate] = []
        for index, header in enumerate(columns):
            if index in resolved:
                continue
            entry = snapshot.lookup(header)
            if entry is not None:
                claim(index, entry.canonical_field, entry.confidence, Origin.DICTIONARY)
                if resolved[index].origin == Origin.DICTIONARY:
                    reused.append(
                        MappingCandidate(
                            raw_header=entry.raw_header,
                            canonical_field=entry.canonical_field,
                            confidence=entry.confidence,
                        )
                    )

        # 3. AI fallback
        pending = [index for index in range(len(columns)) if index not in resolved]
        forwarder_name = known.name if known is not None else None
        if pending:
            fallback_result = await self._consult_fallback(
                [columns[i] for i in pending], sample_rows
            )
            if fallback_result is None:
                for index in pending:
                    resolved[index] = FieldResolution(
                        header=columns[index],
                        origin=Origin.AI_FALLBACK_FAILED,
                        note="fallback unavailable",
                    )
                    insights.append(
                        UnmappedFieldInsight(header=columns[index], reason="fallback_failed")
                    )
            else:
                forwarder_name = forwarder_name or fallback_result.forwarder_name
                for index in pending:
                    self._apply_suggestion(index, columns[index], fallback_result, claim, resolved, insights)

        resolutions = [resolved[index] for index in range(len(columns))]
        # A repeated header reports its first column
        column_mapping: dict[str, str] = {}
        per_field_confidence: dict[str, float] = {}
        for r in resolutions:
            if r.header in per_field_confidence:
                continue
            per_field_confidence[r.header] = r.confidence
            if r.is_mapped:
                column_mapping[r.header] = r.canonical_field
        overall = (
            sum(r.confidence for r in resolutions) / len(resolutions) if resolutions else 0.0
        )

        candidates = [
            MappingCandidate(
                raw_header=r.header, canonical_field=r.canonical_field, confidence=r.confidence
            )
            for r in resolutions
            if r.origin == Origin.AI_FALLBACK and r.confidence >= self.learning_threshold
        ]

        learned = 0
        reused_count = 0
        if self.dictionary_store is not None:
            if candidates:
                learned = await self.dictionary_store.batch_upsert(
                    candidates, self.learning_threshold
                )
            reused_count = await self._record_reuse(reused)

        result = ResolutionResult(
            column_mapping=column_mapping,
            per_field_confidence=per_field_confidence,
            resolutions=resolutions,
            overall_confidence=overall,
            forwarder_name=forwarder_name,
            format_id=known.id if known is not None else None,
            unmapped_field_insights=insights,
            learning_candidates=candidates,
            learned_count=learned,
            reused_count=reused_count,
            ignored_headers=ignored,
        )
        logger.info(
            f"Resolved {len(column_mapping)}/{len(columns)} headers "
            f"(overall confidence {overall:.2f}, learned {learned}, reused {reused_count})"
        )
        return result

    async def _record_reuse(self, reused: list[MappingCandidate]) -> int:
        """Count one use of every dictionary entry this import resolved from."""
        recorded = 0
        for candidate in reused:
            entry = await self.dictionary_store.upsert(
                candidate.raw_header, candidate.canonical_field, candidate.confidence
            )
            if entry is not None:
                recorded += 1
        return recorded

    async def _consult_fallback(
        self, headers: list[str], sample_rows: list[dict]
    ) -> Optional[FallbackResult]:
        """Ask the fallback about unresolved headers; None when it is unavailable."""
        if self.fallback is None:
            logger.warning(f"No fallback configured; {len(headers)} headers left unmapped")
            return None
        try:
            return await asyncio.wait_for(
                self.fallback.suggest(headers, sample_rows), timeout=self.fallback_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Fallback timed out after {self.fallback_timeout}s; {len(headers)} headers left unmapped"
            )
        except Exception as e:
            logger.warning(f"Fallback failed ({e}); {len(headers)} headers left unmapped")
        return None

    @staticmethod
    def _apply_suggestion(index, header, fallback_result, claim, resolved, insights):
        suggestion = fallback_result.suggestions.get(header)
        if suggestion is None:
            resolved[index] = FieldResolution(header=header, origin=Origin.UNMAPPED, note="no suggestion")
            insights.append(UnmappedFieldInsight(header=header, reason="no_suggestion"))
            return

        canonical = suggestion.suggested_canonical_field
        if is_canonical(canonical) and suggestion.confidence > 0:
            claim(index, canonical, suggestion.confidence, Origin.AI_FALLBACK)
            return

        resolved[index] = FieldResolution(header=header, origin=Origin.UNMAPPED, note="unknown field")
        insights.append(
            UnmappedFieldInsight(
                header=header,
                reason="unknown_field" if canonical else "no_suggestion",
                potential_meaning=suggestion.potential_meaning,
                suggested_canonical_field=canonical,
                confidence_score=suggestion.confidence,
                data_type=suggestion.data_type,
            )
        )

    def build_units(
        self,
        result: ResolutionResult,
        rows: list[dict[str, Any]],
    ) -> list[ResolvedImportUnit]:
        """Project raw rows onto canonical fields using a resolution."""
        known: Optional[KnownFormatDefinition] = (
            self.registry.get(result.format_id) if result.format_id else None
        )
        ignored = set(result.ignored_headers)

        units = []
        for row_index, row in enumerate(rows):
            fields: dict[str, ResolvedField] = {}
            unmapped: dict[str, Any] = {}
            seen: set[str] = set()

            for resolution in result.resolutions:
                header = resolution.header
                seen.add(header)
                raw = row.get(header)
                if not resolution.is_mapped:
                    unmapped[header] = raw
                    continue

                canonical = resolution.canonical_field
                if (
                    resolution.origin == Origin.KNOWN_FORMAT
                    and known is not None
                    and canonical in known.transformations
                ):
                    value = known.transform(canonical, raw)
                else:
                    value = coerce_value(canonical, raw)

                fields[canonical] = ResolvedField(
                    value=value,
                    original_value=raw,
                    source_header=header,
                    confidence=resolution.confidence,
                    origin=resolution.origin,
                )

            # Keys outside the declared headers are kept rather than dropped
            for header, raw in row.items():
                if not isinstance(header, str) or header in seen or header in ignored:
                    continue
                if not normalize_header(header):
                    continue
                unmapped[header] = raw

            units.append(ResolvedImportUnit(row_index=row_index, fields=fields, unmapped=unmapped))

        return units

"""Known-format fingerprint matching."""

import logging
from typing import Iterable, Optional

from ..config import settings
from .catalogue import KNOWN_FORMATS
from .models import FormatMatch, KnownFormatDefinition, normalize_header

logger = logging.getLogger(__name__)


def _contains_either_way(a: str, b: str) -> bool:
    """Bidirectional containment on normalized, non-blank strings."""
    if not a or not b:
        return False
    return a in b or b in a


class KnownFormatRegistry:
    """
    Static catalogue of carrier export layouts.

    Matching is deterministic and side-effect-free: a required header fragment
    counts as present when it is contained in some input header or the input
    header is contained in it, since carrier exports routinely decorate
    headers with unit codes or abbreviations.
    """

    def __init__(
        self,
        formats: Optional[Iterable[KnownFormatDefinition]] = None,
        min_confidence: Optional[float] = None,
    ):
        self.formats: tuple[KnownFormatDefinition, ...] = tuple(
            KNOWN_FORMATS if formats is None else formats
        )
        self.min_confidence = (
            settings.known_format_min_confidence if min_confidence is None else min_confidence
        )

    def get(self, format_id: str) -> Optional[KnownFormatDefinition]:
        """Get a registered format by ID."""
        for known in self.formats:
            if known.id == format_id:
                return known
        return None

    def match(self, headers: list[str]) -> FormatMatch:
        """
        Match a header set against every registered format.

        Returns the highest-confidence format at or above the minimum
        confidence (ties keep the first registered). Without a match every
        header is reported unmatched.
        """
        headers = [h for h in (headers or []) if isinstance(h, str)]
        normalized = [normalize_header(h) for h in headers]

        best = FormatMatch(
            is_known_format=False,
            format=None,
            confidence=0.0,
            matched_headers=[],
            unmatched_headers=list(headers),
        )

        for known in self.formats:
            required = [normalize_header(r) for r in known.required_headers]
            if not required:
                continue

            present = [
                req for req in required if any(_contains_either_way(h, req) for h in normalized)
            ]
            confidence = len(present) / len(required)

            if confidence >= self.min_confidence and confidence > best.confidence:
                mapping_keys = [normalize_header(k) for k in known.column_mapping]
                matched = []
                unmatched = []
                for header, norm in zip(headers, normalized):
                    if any(_contains_either_way(norm, key) for key in mapping_keys):
                        matched.append(header)
                    else:
                        unmatched.append(header)

                best = FormatMatch(
                    is_known_format=True,
                    format=known,
                    confidence=confidence,
                    matched_headers=matched,
                    unmatched_headers=unmatched,
                )

        if best.is_known_format:
            logger.info(
                f"Detected known format '{best.format.name}' "
                f"(confidence {best.confidence:.2f}, {len(best.matched_headers)} headers covered)"
            )
        else:
            logger.debug(f"No known format matched {len(headers)} headers")
        return best

    @staticmethod
    def resolve_header(known: KnownFormatDefinition, header: str) -> Optional[str]:
        """
        Resolve one header to a canonical field using a format's column mapping.

        An exact normalized key wins; otherwise the first key in declaration
        order that contains, or is contained in, the header.
        """
        norm = normalize_header(header)
        if not norm:
            return None

        for key, canonical in known.column_mapping.items():
            if normalize_header(key) == norm:
                return canonical
        for key, canonical in known.column_mapping.items():
            if _contains_either_way(norm, normalize_header(key)):
                return canonical
        return None

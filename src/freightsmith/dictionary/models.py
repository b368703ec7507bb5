"""Data models for the learned header dictionary."""

from datetime import datetime, timezone
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from pydantic import BaseModel, Field

from ..fields import field_order
from ..formats.models import normalize_header


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class HeaderMappingEntry(BaseModel):
    """A learned header -> canonical field mapping."""

    id: Optional[int] = None
    raw_header: str  # normalized: lowercase, trimmed
    canonical_field: str
    confidence: float = Field(ge=0.0, le=1.0)
    times_used: int = Field(default=0, ge=0)
    last_used_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_utc_now)


class MappingCandidate(BaseModel):
    """A resolution offered to the dictionary for learning."""

    raw_header: str
    canonical_field: str
    confidence: float = Field(ge=0.0, le=1.0)


class MappingNotFoundError(Exception):
    """Exception raised when a dictionary entry does not exist."""

    pass


def _outranks(candidate: HeaderMappingEntry, current: HeaderMappingEntry) -> bool:
    """Most-used wins; equal usage falls back to canonical declaration order."""
    if candidate.times_used != current.times_used:
        return candidate.times_used > current.times_used
    return field_order(candidate.canonical_field) < field_order(current.canonical_field)


class DictionarySnapshot:
    """
    Immutable, point-in-time view of the header dictionary.

    A snapshot is loaded once per import and passed explicitly into
    resolution, so every occurrence of a header within one import resolves
    identically even while other imports write new entries.
    """

    def __init__(self, entries: Iterable[HeaderMappingEntry] = (), loaded_at: Optional[datetime] = None):
        lookup: dict[str, HeaderMappingEntry] = {}
        for entry in entries:
            key = normalize_header(entry.raw_header)
            if not key:
                continue
            existing = lookup.get(key)
            if existing is None or _outranks(entry, existing):
                lookup[key] = entry

        ordered = sorted(lookup.items(), key=lambda item: -item[1].times_used)
        self._entries: Mapping[str, HeaderMappingEntry] = MappingProxyType(dict(ordered))
        self.loaded_at = loaded_at or _utc_now()

    def lookup(self, header: str) -> Optional[HeaderMappingEntry]:
        """Return the authoritative entry for a header, if any."""
        return self._entries.get(normalize_header(header))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, header: str) -> bool:
        return normalize_header(header) in self._entries

    def __iter__(self) -> Iterator[HeaderMappingEntry]:
        return iter(self._entries.values())

    def as_dict(self) -> Mapping[str, HeaderMappingEntry]:
        return self._entries

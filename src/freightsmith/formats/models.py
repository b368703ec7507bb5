"""Data models for known carrier export layouts."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

Transformation = Callable[[Any], Any]


def normalize_header(header: Optional[str]) -> str:
    """Lowercase and trim a header for comparison."""
    return (header or "").lower().strip()


@dataclass(frozen=True)
class KnownFormatDefinition:
    """A previously-seen carrier export layout."""

    id: str
    name: str
    description: str
    required_headers: tuple[str, ...]
    column_mapping: Mapping[str, str]  # raw header -> canonical field, in declaration order
    transformations: Mapping[str, Transformation] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "required_headers", tuple(self.required_headers))
        object.__setattr__(self, "column_mapping", MappingProxyType(dict(self.column_mapping)))
        object.__setattr__(self, "transformations", MappingProxyType(dict(self.transformations)))

    def transform(self, canonical_field: str, value: Any) -> Any:
        """Apply this format's coercion for a field, if it declares one."""
        transformation = self.transformations.get(canonical_field)
        if transformation is None:
            return value
        return transformation(value)


@dataclass
class FormatMatch:
    """Result of matching a header set against the registry."""

    is_known_format: bool
    format: Optional[KnownFormatDefinition]
    confidence: float
    matched_headers: list[str] = field(default_factory=list)
    unmatched_headers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "is_known_format": self.is_known_format,
            "format_id": self.format.id if self.format else None,
            "format_name": self.format.name if self.format else None,
            "confidence": self.confidence,
            "matched_headers": list(self.matched_headers),
            "unmatched_headers": list(self.unmatched_headers),
        }

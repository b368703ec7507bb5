"""Known carrier export formats and value transforms."""

from .models import KnownFormatDefinition, FormatMatch, normalize_header
from .catalogue import KNOWN_FORMATS, STANDARD_CONTAINER_EXPORT
from .registry import KnownFormatRegistry

__all__ = [
    "KnownFormatDefinition",
    "FormatMatch",
    "normalize_header",
    "KNOWN_FORMATS",
    "STANDARD_CONTAINER_EXPORT",
    "KnownFormatRegistry",
]

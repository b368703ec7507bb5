"""Header resolution engine."""

from .models import (
    Origin,
    FieldResolution,
    UnmappedFieldInsight,
    ResolutionResult,
    ResolvedField,
    ResolvedImportUnit,
)
from .fallback import (
    AIFallbackResolver,
    FallbackResult,
    FallbackSuggestion,
    FallbackUnavailableError,
    LLMFallbackResolver,
)
from .resolver import FieldResolver

__all__ = [
    "Origin",
    "FieldResolution",
    "UnmappedFieldInsight",
    "ResolutionResult",
    "ResolvedField",
    "ResolvedImportUnit",
    "AIFallbackResolver",
    "FallbackResult",
    "FallbackSuggestion",
    "FallbackUnavailableError",
    "LLMFallbackResolver",
    "FieldResolver",
]

"""Learned header dictionary."""

from .models import (
    HeaderMappingEntry,
    MappingCandidate,
    DictionarySnapshot,
    MappingNotFoundError,
)
from .storage import DictionaryStore

__all__ = [
    "HeaderMappingEntry",
    "MappingCandidate",
    "DictionarySnapshot",
    "MappingNotFoundError",
    "DictionaryStore",
]

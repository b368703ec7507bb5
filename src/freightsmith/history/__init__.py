"""Import and risk history persistence."""

from .models import ImportRecord, ImportNotFoundError, RiskSnapshot
from .store import HistoryStore

__all__ = ["ImportRecord", "ImportNotFoundError", "RiskSnapshot", "HistoryStore"]

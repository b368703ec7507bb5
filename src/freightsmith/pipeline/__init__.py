"""Import pipeline and improvement loop."""

from .models import ImportOutcome, ImprovementOutcome, PendingSuggestion
from .service import ImportService
from .improvement import ImprovementPlanner

__all__ = [
    "ImportOutcome",
    "ImprovementOutcome",
    "PendingSuggestion",
    "ImportService",
    "ImprovementPlanner",
]

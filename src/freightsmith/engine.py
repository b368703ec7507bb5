"""Wires stores, resolver and services into one runtime."""

import logging
from pathlib import Path
from typing import Optional

from .config import settings
from .dictionary import DictionaryStore
from .formats import KnownFormatRegistry
from .history import HistoryStore
from .llm import create_llm_client
from .pipeline import ImportService, ImprovementPlanner
from .quality import QualityScorer
from .resolution import AIFallbackResolver, FieldResolver, LLMFallbackResolver
from .risk import RiskStateMachine

logger = logging.getLogger(__name__)


def create_fallback() -> Optional[AIFallbackResolver]:
    """Create the LLM fallback if it is enabled and a provider key is configured."""
    if not settings.fallback_enabled:
        logger.info("AI fallback disabled")
        return None
    try:
        client = create_llm_client()
    except ValueError as e:
        logger.warning(f"AI fallback unavailable: {e}")
        return None
    return LLMFallbackResolver(client=client)


class FreightSmithEngine:
    """Owns the persistent stores and the services built on them."""

    def __init__(
        self,
        db_path: Optional[Path] = None,
        fallback: Optional[AIFallbackResolver] = None,
        use_default_fallback: bool = True,
    ):
        self.dictionary_store = DictionaryStore(db_path)
        self.history_store = HistoryStore(db_path)
        self.registry = KnownFormatRegistry()
        if fallback is None and use_default_fallback:
            fallback = create_fallback()
        self.fallback = fallback

        self.scorer = QualityScorer()
        self.director = RiskStateMachine()
        self.resolver = FieldResolver(
            registry=self.registry,
            dictionary_store=self.dictionary_store,
            fallback=self.fallback,
        )
        self.import_service = ImportService(
            self.dictionary_store,
            self.history_store,
            resolver=self.resolver,
            scorer=self.scorer,
            director=self.director,
        )
        self.improvement_planner = ImprovementPlanner(
            self.dictionary_store,
            self.history_store,
            fallback=self.fallback,
            scorer=self.scorer,
        )

    async def initialize(self):
        """Open the stores."""
        await self.dictionary_store.initialize()
        await self.history_store.initialize()
        logger.info(f"FreightSmith ready (database: {self.dictionary_store.db_path})")

    async def shutdown(self):
        """Close the stores."""
        await self.dictionary_store.close()
        await self.history_store.close()

"""AI fallback resolution for headers no format or dictionary entry covers."""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..config import settings
from ..fields import FIELD_REGISTRY
from ..llm import LLMClient

logger = logging.getLogger(__name__)


class FallbackUnavailableError(Exception):
    """Exception raised when the fallback resolver cannot produce suggestions."""

    pass


class FallbackSuggestion(BaseModel):
    """The fallback's reading of one header."""

    suggested_canonical_field: Optional[str] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    potential_meaning: Optional[str] = None
    data_type: Optional[str] = None


class FallbackResult(BaseModel):
    """Suggestions for a batch of headers."""

    forwarder_name: Optional[str] = None
    suggestions: dict[str, FallbackSuggestion] = Field(default_factory=dict)  # header -> suggestion


class AIFallbackResolver(ABC):
    """Abstract base class for fallback resolvers."""

    @abstractmethod
    async def suggest(self, headers: list[str], sample_rows: list[dict]) -> FallbackResult:
        """Suggest canonical fields for headers. May raise on failure."""
        pass


FALLBACK_SYSTEM_PROMPT = """You are a logistics data expert. You map spreadsheet column headers \
from container tracking exports onto a fixed set of canonical fields. Respond with a single \
JSON object and nothing else."""


def _canonical_reference() -> str:
    return "\n".join(f"- {d.name}: {d.label}" for d in FIELD_REGISTRY)


def build_fallback_prompt(headers: list[str], sample_rows: list[dict]) -> str:
    """Build the user prompt for a batch of unresolved headers."""
    return f"""HEADERS: {json.dumps(headers)}
SAMPLE DATA: {json.dumps(sample_rows, indent=2, default=str)}

CANONICAL FIELDS:
{_canonical_reference()}

1. Identify the carrier or forwarder if possible.
2. Map each header to at most one canonical field, with a confidence between 0 and 1.
3. For every header that does not fit a canonical field, describe what it likely means.

Response format:
{{
  "forwarderName": "string or null",
  "mappedFields": {{
    "canonical_field": {{"originalHeader": "Header", "confidenceScore": 0.9}}
  }},
  "unmappedFields": {{
    "Header": {{
      "potentialMeaning": "what it represents",
      "suggestedCanonicalField": "closest field or null",
      "confidenceScore": 0.5,
      "dataType": "string | number | date | currency"
    }}
  }}
}}"""


def _clamp(value: Any) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    return min(max(score, 0.0), 1.0)


def parse_fallback_response(text: str, headers: list[str]) -> FallbackResult:
    """
    Parse the model's JSON answer into a FallbackResult.

    Only the requested headers are kept. Raises FallbackUnavailableError
    when the answer is not a JSON object.
    """
    cleaned = text.replace("```json", "").replace("```", "").strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise FallbackUnavailableError(f"Fallback returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise FallbackUnavailableError("Fallback response is not a JSON object")

    wanted = set(headers)
    suggestions: dict[str, FallbackSuggestion] = {}

    for canonical, info in (data.get("mappedFields") or {}).items():
        if isinstance(info, str):
            header, score = info, 0.0
        elif isinstance(info, dict):
            header, score = info.get("originalHeader"), info.get("confidenceScore")
        else:
            continue
        if header in wanted and header not in suggestions:
            suggestions[header] = FallbackSuggestion(
                suggested_canonical_field=canonical, confidence=_clamp(score)
            )

    for header, info in (data.get("unmappedFields") or {}).items():
        if header not in wanted or header in suggestions or not isinstance(info, dict):
            continue
        suggestions[header] = FallbackSuggestion(
            suggested_canonical_field=info.get("suggestedCanonicalField"),
            confidence=_clamp(info.get("confidenceScore")),
            potential_meaning=info.get("potentialMeaning"),
            data_type=info.get("dataType"),
        )

    forwarder = data.get("forwarderName")
    return FallbackResult(
        forwarder_name=forwarder if isinstance(forwarder, str) and forwarder else None,
        suggestions=suggestions,
    )


class LLMFallbackResolver(AIFallbackResolver):
    """Fallback resolver backed by the configured LLM provider."""

    def __init__(
        self,
        client: Optional[LLMClient] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        sample_rows: Optional[int] = None,
    ):
        self.client = client
        if model is None:
            model = (
                settings.openrouter_model
                if settings.llm_provider == "openrouter"
                else settings.model_name
            )
        self.model = model
        self.max_tokens = max_tokens or settings.fallback_max_tokens
        self.sample_rows = settings.fallback_sample_rows if sample_rows is None else sample_rows

    async def suggest(self, headers: list[str], sample_rows: list[dict]) -> FallbackResult:
        if self.client is None:
            raise FallbackUnavailableError("No LLM client configured")
        if not headers:
            return FallbackResult()

        samples = [
            {h: row.get(h) for h in headers} for row in sample_rows[: self.sample_rows]
        ]
        prompt = build_fallback_prompt(headers, samples)

        logger.info(f"Asking {self.model} to resolve {len(headers)} headers")
        response = await asyncio.to_thread(
            self.client.create_message,
            messages=[{"role": "user", "content": prompt}],
            system=FALLBACK_SYSTEM_PROMPT,
            max_tokens=self.max_tokens,
            model=self.model,
        )

        text = response.text()
        if not text:
            raise FallbackUnavailableError(f"Empty fallback response (stop: {response.stop_reason})")
        return parse_fallback_response(text, headers)

"""Configuration management for FreightSmith."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


class Settings(BaseModel):
    """Application settings."""

    # Database path for the header dictionary and import history
    database_path: Path = Path(os.getenv("DATABASE_PATH", "data/freightsmith.db"))

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()

    # LLM Provider settings ('anthropic' or 'openrouter')
    llm_provider: str = os.getenv("LLM_PROVIDER", "anthropic")
    anthropic_api_key: Optional[str] = os.getenv("ANTHROPIC_API_KEY")
    openrouter_api_key: Optional[str] = os.getenv("OPENROUTER_API_KEY")
    openrouter_model: str = os.getenv("OPENROUTER_MODEL", "anthropic/claude-3.5-sonnet")
    model_name: str = os.getenv("MODEL_NAME", "claude-sonnet-4-20250514")

    # AI fallback resolver - only consulted for headers no format or dictionary entry covers
    fallback_enabled: bool = os.getenv("FALLBACK_ENABLED", "true").lower() == "true"
    fallback_max_tokens: int = int(os.getenv("FALLBACK_MAX_TOKENS", "1500"))
    fallback_timeout_seconds: float = float(os.getenv("FALLBACK_TIMEOUT_SECONDS", "15"))
    fallback_sample_rows: int = int(os.getenv("FALLBACK_SAMPLE_ROWS", "3"))

    # Resolution thresholds
    known_format_min_confidence: float = float(os.getenv("KNOWN_FORMAT_MIN_CONFIDENCE", "0.8"))
    dictionary_confidence_threshold: float = float(
        os.getenv("DICTIONARY_CONFIDENCE_THRESHOLD", "0.9")
    )  # AI mappings at or above this graduate into the dictionary
    pending_confidence_threshold: float = float(
        os.getenv("PENDING_CONFIDENCE_THRESHOLD", "0.7")
    )  # Improvement suggestions at or above this are kept for review

    # Demurrage / detention rates (USD per day) and free time
    demurrage_daily_rate: float = float(os.getenv("DEMURRAGE_DAILY_RATE", "150"))
    detention_daily_rate: float = float(os.getenv("DETENTION_DAILY_RATE", "175"))
    detention_free_days: int = int(os.getenv("DETENTION_FREE_DAYS", "10"))
    detention_alert_days: int = int(os.getenv("DETENTION_ALERT_DAYS", "14"))


settings = Settings()

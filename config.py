"""
Runtime settings for the Wikipedia quiz generator.
Values come from the process environment (or a local .env file) and are
handed to each component explicitly.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///./wiki_quiz.db"
DEFAULT_LLM_BASE_URL = "https://ai.gateway.lovable.dev/v1"
DEFAULT_LLM_MODEL = "google/gemini-2.5-flash"
USER_AGENT = "WikiQuizApp/1.0 (Educational Quiz Generator)"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    llm_api_key: Optional[str] = None
    llm_base_url: str = DEFAULT_LLM_BASE_URL
    llm_model: str = DEFAULT_LLM_MODEL
    fetch_timeout: float = 20.0
    llm_timeout: float = 60.0
    max_article_chars: int = 15000
    user_agent: str = USER_AGENT
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, loading .env first."""
        load_dotenv()
        api_key = (
            os.getenv("LLM_API_KEY")
            or os.getenv("LOVABLE_API_KEY")
            or os.getenv("GEMINI_API_KEY")
        )
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            database_url=os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL,
            llm_api_key=api_key or None,
            llm_base_url=os.getenv("LLM_BASE_URL") or DEFAULT_LLM_BASE_URL,
            llm_model=os.getenv("LLM_MODEL") or DEFAULT_LLM_MODEL,
            fetch_timeout=_float_env("FETCH_TIMEOUT", 20.0),
            llm_timeout=_float_env("LLM_TIMEOUT", 60.0),
            max_article_chars=_int_env("MAX_ARTICLE_CHARS", 15000),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()] or ["*"],
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

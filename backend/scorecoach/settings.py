"""
Runtime configuration for the score-report service.

Values come from the environment (a local .env file is loaded once at import)
and are exposed as a frozen Settings object through get_settings().
"""
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.environ.get(name, "")
    items = tuple(part.strip() for part in raw.split(",") if part.strip())
    return items or default


@dataclass(frozen=True)
class Settings:
    openai_api_key: str = ""
    question_model: str = "gpt-4.1-nano"
    question_temperature: float = 0.5
    generation_timeout_seconds: float = 30.0
    default_question_count: int = 10
    max_question_count: int = 50
    # a section with more incorrect answers than this marks every topic weak
    weak_incorrect_threshold: int = 5
    cors_allow_origins: Tuple[str, ...] = field(default=("http://localhost:5173",))
    log_level: str = "INFO"

    @property
    def generation_enabled(self) -> bool:
        return bool(self.openai_api_key)


def load_settings() -> Settings:
    return Settings(
        openai_api_key=os.environ.get("OPENAI_API_KEY", "").strip(),
        question_model=os.environ.get("QUESTION_MODEL", "gpt-4.1-nano").strip() or "gpt-4.1-nano",
        question_temperature=_env_float("QUESTION_TEMPERATURE", 0.5),
        generation_timeout_seconds=_env_float("GENERATION_TIMEOUT_SECONDS", 30.0),
        default_question_count=_env_int("DEFAULT_QUESTION_COUNT", 10),
        max_question_count=_env_int("MAX_QUESTION_COUNT", 50),
        weak_incorrect_threshold=_env_int("WEAK_INCORRECT_THRESHOLD", 5),
        cors_allow_origins=_env_list("CORS_ALLOW_ORIGINS", ("http://localhost:5173",)),
        log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()

"""
Philosearch Configuration
=========================

Settings read from the environment, with a project-level .env file
loaded first when present. Each concern has its own dataclass whose
fields default from an environment variable, so a section can also be
built directly with explicit values (tests, embedding applications).

Environment Variables:
    DATABASE_URL: PostgreSQL DSN of the pgvector corpus (pg store only)
    CORPUS_TABLE: Table holding the embedded chunks (default: paper_chunks)
    DATABASE_CONNECT_TIMEOUT: Connect timeout in seconds (default: 10)

    OPENAI_API_KEY: Key for query embeddings (OpenAI embedder only)
    EMBEDDING_MODEL: Must match the corpus (default: text-embedding-ada-002)
    EMBEDDING_DIMENSIONS: Vector length stored in the corpus (default: 1536)

    RAG_DEFAULT_TOP_K: Passages per retrieval (default: 6)
    RAG_COMMON_POOL_ID: Pool id of the shared collection (default: common)
    RAG_OWN_POOL_RATIO: Own-pool share of the free slots (default: 0.67)
    RAG_OVERFETCH_FACTOR: Candidates fetched per allocated slot (default: 2)
    RAG_TIMEOUT_SECONDS: Deadline of one retrieval (default: 30)

    QUOTE_MIN_LENGTH / QUOTE_MAX_LENGTH: Quote bounds in characters (50 / 500)
    QUOTE_MIN_WORDS: Minimum words per quote (default: 8)
    QUOTE_MAX_QUOTES: Quotes per extraction (default: 10)

    LOG_LEVEL / LOG_JSON / LOG_FILE: See src.core.logging_config
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv

T = TypeVar("T")

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# Variables already set in the process win over the file
if (PROJECT_ROOT / ".env").exists():
    load_dotenv(PROJECT_ROOT / ".env", override=False)


def get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Raw environment value; empty strings count as unset."""
    value = os.getenv(key)
    return default if value in (None, "") else value


def _parse_env(key: str, default: T, parse: Callable[[str], T], kind: str) -> T:
    raw = get_env(key)
    if raw is None:
        return default
    try:
        return parse(raw)
    except ValueError:
        raise ValueError(f"{key} must be {kind}, got {raw!r}")


def get_env_int(key: str, default: int) -> int:
    return _parse_env(key, default, int, "an integer")


def get_env_float(key: str, default: float) -> float:
    return _parse_env(key, default, float, "a number")


def get_env_bool(key: str, default: bool) -> bool:
    """true/1/yes/on (any case) are True, anything else False."""
    return _parse_env(key, default, lambda raw: raw.strip().lower() in ("true", "1", "yes", "on"), "a flag")


@dataclass
class DatabaseConfig:
    """Connection to the pgvector corpus."""

    url: Optional[str] = field(default_factory=lambda: get_env("DATABASE_URL"))
    table: str = field(default_factory=lambda: get_env("CORPUS_TABLE", "paper_chunks"))
    connect_timeout: int = field(default_factory=lambda: get_env_int("DATABASE_CONNECT_TIMEOUT", 10))

    def __post_init__(self):
        # Interpolated into SQL, so only plain identifiers
        if not self.table.replace("_", "").isalnum():
            raise ValueError(f"CORPUS_TABLE must be a plain identifier, got: {self.table}")
        if self.connect_timeout <= 0:
            raise ValueError("DATABASE_CONNECT_TIMEOUT must be positive")


@dataclass
class EmbeddingConfig:
    """Query embedding model; must be the model the corpus was built with."""

    api_key: Optional[str] = field(default_factory=lambda: get_env("OPENAI_API_KEY"))
    model: str = field(default_factory=lambda: get_env("EMBEDDING_MODEL", "text-embedding-ada-002"))
    dimensions: int = field(default_factory=lambda: get_env_int("EMBEDDING_DIMENSIONS", 1536))

    def __post_init__(self):
        if self.dimensions <= 0:
            raise ValueError("EMBEDDING_DIMENSIONS must be positive")


@dataclass
class RetrievalConfig:
    """Pool layout and limits of the retrieval coordinator."""

    default_top_k: int = field(default_factory=lambda: get_env_int("RAG_DEFAULT_TOP_K", 6))
    common_pool_id: str = field(default_factory=lambda: get_env("RAG_COMMON_POOL_ID", "common"))
    own_pool_ratio: float = field(default_factory=lambda: get_env_float("RAG_OWN_POOL_RATIO", 0.67))
    overfetch_factor: int = field(default_factory=lambda: get_env_int("RAG_OVERFETCH_FACTOR", 2))
    timeout_seconds: float = field(default_factory=lambda: get_env_float("RAG_TIMEOUT_SECONDS", 30.0))

    def __post_init__(self):
        problems = []
        if self.default_top_k < 0:
            problems.append("RAG_DEFAULT_TOP_K cannot be negative")
        if not 0.0 <= self.own_pool_ratio <= 1.0:
            problems.append("RAG_OWN_POOL_RATIO must be within [0, 1]")
        if self.overfetch_factor < 1:
            problems.append("RAG_OVERFETCH_FACTOR must be at least 1")
        if self.timeout_seconds <= 0:
            problems.append("RAG_TIMEOUT_SECONDS must be positive")
        if problems:
            raise ValueError("; ".join(problems))


@dataclass
class QuoteConfig:
    """Thresholds of the quote extractor."""

    min_length: int = field(default_factory=lambda: get_env_int("QUOTE_MIN_LENGTH", 50))
    max_length: int = field(default_factory=lambda: get_env_int("QUOTE_MAX_LENGTH", 500))
    min_words: int = field(default_factory=lambda: get_env_int("QUOTE_MIN_WORDS", 8))
    max_quotes: int = field(default_factory=lambda: get_env_int("QUOTE_MAX_QUOTES", 10))

    def __post_init__(self):
        if self.min_length > self.max_length:
            raise ValueError("QUOTE_MIN_LENGTH cannot exceed QUOTE_MAX_LENGTH")


@dataclass
class LoggingConfig:
    level: str = field(default_factory=lambda: get_env("LOG_LEVEL", "INFO"))
    json_logs: bool = field(default_factory=lambda: get_env_bool("LOG_JSON", False))
    log_file: Optional[str] = field(default_factory=lambda: get_env("LOG_FILE"))


@dataclass
class Settings:
    """All configuration sections."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    quotes: QuoteConfig = field(default_factory=QuoteConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    app_name: str = "philosearch"
    app_version: str = "1.0.0"


_settings: Optional[Settings] = None


def load_settings() -> Settings:
    """
    Build every section from the current environment.

    Raises:
        ValueError: If a variable is malformed or out of range
    """
    return Settings()


def get_settings() -> Settings:
    """Process-wide settings, built on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings; the next get_settings() re-reads the environment."""
    global _settings
    _settings = None

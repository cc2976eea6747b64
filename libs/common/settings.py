"""Application settings for the Tracewise troubleshooting agent."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from ``TRACEWISE_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TRACEWISE_",
        env_file=None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Core application settings
    app_env: Literal["development", "test", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False
    version: str = "1.0.0"

    # CORS - use string to avoid JSON parsing issues
    cors_origins_str: str = Field(default="http://localhost:3000,https://localhost:3000", alias="cors_origins")

    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from string."""
        if not self.cors_origins_str.strip():
            return ["http://localhost:3000", "https://localhost:3000"]
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    # Storage
    redis_url: Optional[str] = None

    # Models
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    embedding_model: str = "text-embedding-3-small"
    classifier_model: str = "gpt-4o-mini"
    synthesis_model: str = "gpt-4o"
    llm_timeout_seconds: float = 30.0

    # Semantic cache
    cache_similarity_threshold: float = 0.85
    cache_top_k: int = Field(default=3, ge=1)
    embedding_max_chars: int = Field(default=1000, ge=1)
    cache_entry_ttl_seconds: Optional[int] = None
    cache_namespace: str = "semantic_memory"

    # Sessions
    session_ttl_seconds: Optional[int] = None
    session_memory_limit: int = Field(default=1000, ge=1)

    # Conversation history
    history_max_messages: int = Field(default=20, ge=2)
    context_messages: int = Field(default=4, ge=0)
    context_message_chars: int = Field(default=200, ge=1)
    history_page_size: int = Field(default=10, ge=1)

    @field_validator("cache_similarity_threshold")
    @classmethod
    def validate_similarity_threshold(cls, v: float) -> float:
        """Similarity scores live in [0, 1]."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("Similarity threshold must be between 0 and 1")
        return v

    @field_validator("cache_entry_ttl_seconds", "session_ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("TTL must be positive when set")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from libs.common.settings import Settings, get_settings


class TestSettings:
    """Test settings configuration."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("TRACEWISE_APP_ENV", raising=False)

        settings = Settings()

        assert settings.app_env == "development"
        assert settings.cache_similarity_threshold == 0.85
        assert settings.cache_top_k == 3
        assert settings.embedding_max_chars == 1000
        assert settings.cache_entry_ttl_seconds is None
        assert settings.history_max_messages == 20
        assert settings.context_messages == 4
        assert settings.context_message_chars == 200
        assert settings.history_page_size == 10
        assert settings.session_ttl_seconds is None
        assert settings.session_memory_limit == 1000

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("TRACEWISE_CACHE_SIMILARITY_THRESHOLD", "0.9")
        monkeypatch.setenv("TRACEWISE_REDIS_URL", "redis://localhost:6379/1")
        monkeypatch.setenv("TRACEWISE_CACHE_ENTRY_TTL_SECONDS", "3600")
        monkeypatch.setenv("TRACEWISE_SESSION_TTL_SECONDS", "86400")

        settings = Settings()

        assert settings.cache_similarity_threshold == 0.9
        assert settings.redis_url == "redis://localhost:6379/1"
        assert settings.cache_entry_ttl_seconds == 3600
        assert settings.session_ttl_seconds == 86400

    def test_threshold_out_of_range_rejected(self, monkeypatch):
        monkeypatch.setenv("TRACEWISE_CACHE_SIMILARITY_THRESHOLD", "1.5")

        with pytest.raises(ValidationError) as exc_info:
            Settings()
        assert "Similarity threshold must be between 0 and 1" in str(exc_info.value)

    @pytest.mark.parametrize("variable", ["TRACEWISE_CACHE_ENTRY_TTL_SECONDS", "TRACEWISE_SESSION_TTL_SECONDS"])
    def test_non_positive_ttl_rejected(self, monkeypatch, variable):
        monkeypatch.setenv(variable, "0")

        with pytest.raises(ValidationError):
            Settings()

    def test_cors_origins_parsing(self):
        settings = Settings(cors_origins="https://a.example, https://b.example,")

        assert settings.cors_origins == ["https://a.example", "https://b.example"]

    def test_test_environment_flag(self):
        settings = get_settings()

        assert settings.is_test
        assert not settings.is_development

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

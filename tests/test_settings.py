"""Tests for settings module."""

import pytest
from pydantic import ValidationError

from termassist.config.settings import Settings, get_settings
from termassist.models.enums import LLMProviderName
from termassist.utils.cache import CacheConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop settings variables that may leak from the host environment."""
    for name in Settings.model_fields:
        monkeypatch.delenv(name.upper(), raising=False)


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.llm_provider == "ollama"
    assert settings.llm_enable_caching is True
    assert settings.llm_cache_ttl_seconds == 300
    assert settings.llm_cache_max_size == 100
    assert settings.log_file is None


def test_cache_config_from_env(monkeypatch):
    monkeypatch.setenv("LLM_CACHE_TTL_SECONDS", "30")
    monkeypatch.setenv("LLM_CACHE_MAX_SIZE", "5")
    monkeypatch.setenv("LLM_CACHE_COALESCE_REQUESTS", "true")

    config = Settings(_env_file=None).cache_config

    assert config.ttl_seconds == 30
    assert config.max_size == 5
    assert config.coalesce_requests is True


def test_invalid_cache_size_fails_fast(monkeypatch):
    monkeypatch.setenv("LLM_CACHE_MAX_SIZE", "0")

    with pytest.raises(CacheConfigError):
        Settings(_env_file=None).cache_config


def test_unknown_provider_rejected(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "gemini")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_app_config(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "claude")
    monkeypatch.setenv("CLAUDE_API_KEY", "sk-test")
    monkeypatch.setenv("LLM_TEMPERATURE", "0.2")

    app_config = Settings(_env_file=None).app_config()

    assert app_config.llm_provider == LLMProviderName.CLAUDE
    assert app_config.active.api_key == "sk-test"
    assert app_config.active.temperature == 0.2
    assert app_config.ollama.url == "http://localhost:11434"


def test_get_settings_returns_fresh_instance():
    assert get_settings() is not get_settings()

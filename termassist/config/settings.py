"""Application settings using Pydantic Settings."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from termassist.models.config import AppConfig, ProviderConfig
from termassist.models.enums import LLMProviderName
from termassist.utils.cache import CacheConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Provider selection
    llm_provider: Literal["ollama", "claude", "openai"] = Field(
        default="ollama", description="Active LLM provider"
    )

    # Ollama (local)
    ollama_url: str = Field(default="http://localhost:11434", description="Ollama server URL")
    ollama_api_key: Optional[str] = Field(default=None, description="Ollama API key (remote instances)")
    ollama_model: str = Field(default="llama3.2", description="Ollama model name")

    # Cloud providers
    claude_api_key: Optional[str] = Field(default=None, description="Anthropic API key")
    claude_model: str = Field(default="claude-3-5-haiku-latest", description="Claude model name")
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o-mini", description="OpenAI model name")

    # LLM Behavior
    llm_temperature: float = Field(default=0.7, description="Sampling temperature (0.0-1.0)")
    llm_max_tokens: int = Field(default=1000, description="Maximum tokens per request")

    # LLM response cache
    llm_enable_caching: bool = Field(default=True, description="Enable response caching")
    llm_cache_ttl_seconds: float = Field(default=300, description="Cache TTL in seconds")
    llm_cache_max_size: int = Field(default=100, description="Maximum number of cached responses")
    llm_cache_coalesce_requests: bool = Field(
        default=False, description="Share one backend call between identical concurrent misses"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file path")
    log_cache_debug: bool = Field(default=False, description="Log every cache hit/miss at DEBUG")

    @property
    def cache_config(self) -> CacheConfig:
        """Cache bounds; raises CacheConfigError on invalid values."""
        return CacheConfig(
            ttl_seconds=self.llm_cache_ttl_seconds,
            max_size=self.llm_cache_max_size,
            coalesce_requests=self.llm_cache_coalesce_requests,
        )

    def _provider(self, model: str, api_key: Optional[str], url: Optional[str] = None) -> ProviderConfig:
        return ProviderConfig(
            model=model,
            url=url,
            api_key=api_key,
            temperature=self.llm_temperature,
            max_tokens=self.llm_max_tokens,
        )

    def app_config(self) -> AppConfig:
        """Build the configuration handed to backends on initialization."""
        return AppConfig(
            llm_provider=LLMProviderName(self.llm_provider),
            ollama=self._provider(self.ollama_model, self.ollama_api_key, self.ollama_url),
            claude=self._provider(self.claude_model, self.claude_api_key),
            openai=self._provider(self.openai_model, self.openai_api_key),
        )


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()

"""Wiring of settings, logging and cached LLM services."""

from typing import Optional

from loguru import logger

from termassist.analysis.llm_service import CommandBackend, LLMService, OllamaService
from termassist.config.settings import Settings, get_settings
from termassist.utils.cache import ResponseCache
from termassist.utils.logger import setup_logger


class _PassThroughCache(ResponseCache):
    """Cache that never serves anything; used when caching is disabled."""

    def store(self, key, value, generation=None) -> bool:
        return False


def build_response_cache(settings: Settings) -> Optional[ResponseCache]:
    """Create a cache from settings, or None when caching is disabled."""
    if not settings.llm_enable_caching:
        return None
    return ResponseCache(settings.cache_config)


def _command_cache(settings: Settings) -> ResponseCache:
    # an empty ResponseCache is falsy (len 0), so test for None explicitly
    cache = build_response_cache(settings)
    if cache is None:
        return _PassThroughCache(settings.cache_config)
    return cache


def _configure(settings: Optional[Settings], configure_logging: bool) -> Settings:
    settings = settings or get_settings()
    if configure_logging:
        setup_logger(
            log_level=settings.log_level,
            log_file=settings.log_file,
            cache_debug=settings.log_cache_debug,
        )
    return settings


def create_llm_service(
    backend: CommandBackend,
    settings: Optional[Settings] = None,
    configure_logging: bool = True,
) -> LLMService:
    """
    Build an LLMService owning fresh caches for ``backend``.

    With ``llm_enable_caching`` off, commands go through a cache that
    never keeps anything and interpretations are not cached at all.
    """
    settings = _configure(settings, configure_logging)
    service = LLMService(
        backend,
        cache=_command_cache(settings),
        interpretation_cache=build_response_cache(settings),
    )
    logger.info(
        f"LLM service ready (provider={settings.llm_provider}, "
        f"caching={'on' if settings.llm_enable_caching else 'off'})"
    )
    return service


def create_ollama_service(
    backend: CommandBackend,
    settings: Optional[Settings] = None,
    configure_logging: bool = True,
) -> OllamaService:
    """Build an OllamaService owning a fresh command cache for ``backend``."""
    settings = _configure(settings, configure_logging)
    return OllamaService(backend, cache=_command_cache(settings))

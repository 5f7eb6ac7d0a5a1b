"""termassist: cached LLM command generation for a terminal assistant."""

from termassist.utils.cache import (
    CacheConfig,
    CacheConfigError,
    CacheEntry,
    CacheInputs,
    ResponseCache,
    make_cache_key,
)

__version__ = "0.1.0"

__all__ = [
    "CacheConfig",
    "CacheConfigError",
    "CacheEntry",
    "CacheInputs",
    "ResponseCache",
    "make_cache_key",
]

"""Analysis module."""

from termassist.analysis.llm_service import (
    BackendCapabilityError,
    CachedCommandService,
    CommandBackend,
    LLMService,
    OllamaService,
    StreamingError,
)

__all__ = [
    "BackendCapabilityError",
    "CachedCommandService",
    "CommandBackend",
    "LLMService",
    "OllamaService",
    "StreamingError",
]

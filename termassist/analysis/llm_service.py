"""Caching service wrappers around LLM command-generation backends."""

import time
import uuid
from contextlib import aclosing
from typing import Any, AsyncIterator, Callable, List, Optional, Protocol, Sequence

from loguru import logger

from termassist.models.config import AppConfig, ProviderConfig
from termassist.models.enums import ProgressType
from termassist.models.llm_response import (
    AICommand,
    CommandInterpretation,
    ConversationMessage,
    StreamingProgress,
)
from termassist.utils.cache import CacheInputs, ResponseCache

StreamingCallback = Callable[[StreamingProgress], None]

_NOT_CACHED = object()


class StreamingError(RuntimeError):
    """Raised when a streamed generation fails or ends without a result."""


class BackendCapabilityError(RuntimeError):
    """Raised when an optional backend capability is requested but missing."""


class CommandBackend(Protocol):
    """
    Transport to an LLM provider (IPC bridge, HTTP client, ...).

    Backends may additionally implement ``interpret_output``,
    ``stream_command`` and ``cancel_stream``; the service checks for them.
    """

    async def init(self, config: Any) -> None: ...

    async def generate_command(
        self,
        prompt: str,
        conversation_history: Optional[List[ConversationMessage]] = None,
        language: Optional[str] = None,
    ) -> AICommand: ...

    async def test_connection(self) -> bool: ...

    async def list_models(self) -> List[str]: ...


def generate_request_id() -> str:
    """Unique id for one streaming request."""
    return f"stream-{int(time.time() * 1000)}-{uuid.uuid4().hex[:7]}"


class CachedCommandService:
    """
    Routes command generation through a ResponseCache.

    The service owns its caches: construct one service per backend
    endpoint and pass it to call sites.
    """

    def __init__(
        self,
        backend: CommandBackend,
        cache: Optional[ResponseCache] = None,
        interpretation_cache: Optional[ResponseCache] = None,
    ):
        """
        Initialize the service.

        Args:
            backend: Transport performing the real LLM requests
            cache: Cache for generated commands (a default one is created if None)
            interpretation_cache: Optional cache for output interpretations;
                without it interpretations always hit the backend
        """
        self.backend = backend
        self.cache = cache if cache is not None else ResponseCache()
        self.interpretation_cache = interpretation_cache

    # ========================================================================
    # COMMAND GENERATION
    # ========================================================================

    async def _call_generate(self, inputs: CacheInputs) -> AICommand:
        return await self.backend.generate_command(
            inputs.prompt,
            list(inputs.history) or None,
            inputs.language,
        )

    async def generate_command(
        self,
        prompt: str,
        conversation_history: Optional[Sequence[ConversationMessage]] = None,
        language: Optional[str] = None,
    ) -> AICommand:
        """
        Generate a shell command from a natural-language prompt.

        Args:
            prompt: What the user wants to do
            conversation_history: Previous turns, oldest first
            language: Interface language tag (defaults to "en")

        Returns:
            AICommand from the cache or from the backend

        Example:
            command = await service.generate_command("list files", history, "en")
            if command.is_command:
                print(command.command)
        """
        inputs = CacheInputs(prompt, conversation_history, language)
        return await self.cache.get_or_compute(inputs, self._call_generate)

    async def stream_command(
        self,
        prompt: str,
        on_progress: StreamingCallback,
        conversation_history: Optional[Sequence[ConversationMessage]] = None,
        language: Optional[str] = None,
    ) -> AICommand:
        """
        Generate a command while reporting progress to ``on_progress``.

        Falls back to a plain (cached) generation when the backend cannot
        stream. A completed stream is stored in the command cache.
        """
        stream = getattr(self.backend, "stream_command", None)
        if stream is None:
            on_progress(StreamingProgress(type=ProgressType.CONNECTING))
            command = await self.generate_command(prompt, conversation_history, language)
            on_progress(StreamingProgress(type=ProgressType.COMPLETE, partial_command=command))
            return command

        inputs = CacheInputs(prompt, conversation_history, language)
        key = inputs.cache_key

        generation = self.cache.generation
        cached = self.cache.lookup(key, default=_NOT_CACHED)
        if cached is not _NOT_CACHED:
            on_progress(StreamingProgress(type=ProgressType.COMPLETE, partial_command=cached))
            return cached

        request_id = generate_request_id()
        logger.debug(f"Starting streamed generation {request_id}")
        events: AsyncIterator[StreamingProgress] = stream(
            request_id, prompt, list(inputs.history) or None, language
        )
        async with aclosing(events):
            async for progress in events:
                on_progress(progress)
                if progress.type == ProgressType.ERROR:
                    raise StreamingError(progress.error or "Streaming failed")
                if progress.type == ProgressType.COMPLETE and progress.partial_command is not None:
                    self.cache.store(key, progress.partial_command, generation)
                    return progress.partial_command

        raise StreamingError(f"Stream {request_id} ended without a result")

    async def cancel_stream(self, request_id: str) -> bool:
        """Cancel an active streaming request; False if unsupported."""
        cancel = getattr(self.backend, "cancel_stream", None)
        if cancel is None:
            return False
        return await cancel(request_id)

    # ========================================================================
    # OUTPUT INTERPRETATION
    # ========================================================================

    async def interpret_output(self, output: str, language: str = "en") -> CommandInterpretation:
        """Explain a command's terminal output."""
        interpret = getattr(self.backend, "interpret_output", None)
        if interpret is None:
            raise BackendCapabilityError(
                f"{type(self.backend).__name__} cannot interpret command output"
            )
        if self.interpretation_cache is None:
            return await interpret(output, language)

        inputs = CacheInputs(output, None, language)
        return await self.interpretation_cache.get_or_compute(
            inputs, lambda i: interpret(i.prompt, i.language)
        )

    # ========================================================================
    # BACKEND PASS-THROUGH
    # ========================================================================

    async def initialize(self, config: Any) -> None:
        """Configure the backend; cached answers of the previous setup are dropped."""
        await self.backend.init(config)
        self.clear_cache()
        logger.info(f"{type(self).__name__} initialized, response cache cleared")

    async def test_connection(self) -> bool:
        return await self.backend.test_connection()

    async def list_models(self) -> List[str]:
        return await self.backend.list_models()

    def clear_cache(self) -> None:
        """Drop every cached answer (e.g. after a model change)."""
        self.cache.clear()
        if self.interpretation_cache is not None:
            self.interpretation_cache.clear()

    def cache_size(self) -> int:
        return self.cache.size()


class LLMService(CachedCommandService):
    """Service for any configured provider (Ollama, Claude, OpenAI)."""

    async def initialize(self, config: AppConfig) -> None:
        logger.info(f"Initializing LLM backend for provider {config.llm_provider}")
        await super().initialize(config)


class OllamaService(CachedCommandService):
    """Service bound to a single Ollama instance."""

    async def initialize(self, config: ProviderConfig) -> None:
        logger.info(f"Initializing Ollama backend: {config.url} ({config.model})")
        await super().initialize(config)

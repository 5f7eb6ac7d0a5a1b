"""In-memory TTL cache for LLM responses with FIFO capacity bound."""

import asyncio
import hashlib
import inspect
import json
import threading
import time
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Hashable, Mapping, Optional, Sequence, Tuple, Union

from loguru import logger

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_MAX_SIZE = 100
DEFAULT_LANGUAGE = "en"

_MISSING = object()


class CacheConfigError(ValueError):
    """Raised when a cache is constructed with an invalid configuration."""


@dataclass(frozen=True)
class CacheConfig:
    """
    Bounds of a ResponseCache.

    Args:
        ttl_seconds: Maximum age (seconds) at which an entry is still served
        max_size: Maximum number of entries held at once
        coalesce_requests: Share one in-flight backend call between
            overlapping misses for the same key
    """
    ttl_seconds: float = DEFAULT_TTL_SECONDS
    max_size: int = DEFAULT_MAX_SIZE
    coalesce_requests: bool = False

    def __post_init__(self):
        ttl = self.ttl_seconds
        if isinstance(ttl, bool) or not isinstance(ttl, (int, float)) or ttl != ttl:
            raise CacheConfigError(f"ttl_seconds must be a number, got {ttl!r}")
        if ttl < 0:
            raise CacheConfigError(f"ttl_seconds must be >= 0, got {ttl}")
        size = self.max_size
        if isinstance(size, bool) or not isinstance(size, int):
            raise CacheConfigError(f"max_size must be an integer, got {size!r}")
        if size <= 0:
            raise CacheConfigError(f"max_size must be > 0, got {size}")


@dataclass(frozen=True)
class CacheEntry:
    """Cached backend response and the moment it was stored."""
    value: Any
    created_at: float


@dataclass(frozen=True)
class CacheInputs:
    """Everything the caller sends to the backend; the cache key is derived from it."""
    prompt: str
    history: Tuple[Any, ...] = field(default_factory=tuple)
    language: Optional[str] = None

    def __post_init__(self):
        # history may arrive as a list or None; freeze it
        object.__setattr__(self, "history", tuple(self.history or ()))

    @property
    def cache_key(self) -> str:
        return make_cache_key(self.prompt, self.history, self.language)


def _canonical(value: Any) -> Any:
    """Reduce messages to plain JSON data; unset (None) fields are dropped."""
    if isinstance(value, Enum):
        return _canonical(value.value)
    if is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: _canonical(getattr(value, f.name))
            for f in fields(value)
            if getattr(value, f.name) is not None
        }
    if isinstance(value, Mapping):
        for k in value:
            if not isinstance(k, str):
                raise TypeError(f"history message keys must be strings, got {k!r}")
        return {k: _canonical(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    return value


def make_cache_key(
    prompt: str,
    history: Optional[Sequence[Any]] = None,
    language: Optional[str] = None,
) -> str:
    """
    Derive the cache key for a request.

    Args:
        prompt: User prompt text
        history: Ordered conversation turns (dataclasses or mappings with
            string keys); ``None`` and an empty sequence are equivalent
        language: Interface language tag, ``None`` means ``"en"``

    Returns:
        SHA-256 hex digest of the canonical JSON form of the inputs

    Raises:
        TypeError: If a history mapping has a non-string key
    """
    payload = json.dumps(
        [prompt, _canonical(list(history or ())), language or DEFAULT_LANGUAGE],
        ensure_ascii=False,
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


BackendCall = Callable[[CacheInputs], Union[Any, Awaitable[Any]]]


class ResponseCache:
    """
    Thread-safe in-memory cache with lazy TTL expiry and FIFO eviction.

    Eviction follows first-insertion order: replacing the value of an
    existing key refreshes its timestamp but keeps its place in line,
    and reads never reorder entries.
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            config: Cache bounds (defaults: 5 minutes, 100 entries)
            clock: Zero-argument callable returning the current time in seconds
        """
        self.config = config or CacheConfig()
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry] = {}
        self._in_flight: Dict[Hashable, "asyncio.Future[Any]"] = {}
        self._generation = 0  # bumped by clear()
        self._lock = threading.Lock()

        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.expirations = 0

    # ========================================================================
    # STORE OPERATIONS
    # ========================================================================

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at > self.config.ttl_seconds

    def _get_fresh(self, key: Hashable) -> Any:
        """Return the fresh value for key or _MISSING. Caller holds the lock."""
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        if self._is_expired(entry, self._clock()):
            del self._entries[key]
            self.expirations += 1
            logger.debug(f"Cache entry expired: {str(key)[:16]}")
            return _MISSING
        return entry.value

    def lookup(self, key: Hashable, default: Any = None) -> Any:
        """Return the cached value if it has not expired, else ``default``."""
        with self._lock:
            value = self._get_fresh(key)
            if value is _MISSING:
                self.misses += 1
                return default
            self.hits += 1
            return value

    @property
    def generation(self) -> int:
        """Counter incremented by every clear()."""
        with self._lock:
            return self._generation

    def store(self, key: Hashable, value: Any, generation: Optional[int] = None) -> bool:
        """
        Insert or replace an entry, evicting the oldest one on overflow.

        Args:
            key: Cache key
            value: Value to keep
            generation: If given, the value is dropped when the cache was
                cleared after this generation was read

        Returns:
            True if the value was stored
        """
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug(f"Cache cleared meanwhile, dropping stale value for {str(key)[:16]}")
                return False
            self._entries[key] = CacheEntry(value=value, created_at=self._clock())
            if len(self._entries) > self.config.max_size:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                self.evictions += 1
                logger.debug(f"Cache full, evicted oldest entry: {str(oldest)[:16]}")
            assert len(self._entries) <= self.config.max_size, "cache exceeded max_size"
            return True

    def contains(self, key: Hashable) -> bool:
        """Check for a fresh entry without touching hit/miss counters."""
        with self._lock:
            return self._get_fresh(key) is not _MISSING

    def clear(self) -> None:
        """Remove all entries; backend calls still running will not store."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._in_flight.clear()
            self._generation += 1
        logger.debug(f"Cache cleared ({count} entries removed)")

    def size(self) -> int:
        """Current number of entries, expired ones included until touched."""
        with self._lock:
            return len(self._entries)

    def cleanup_expired(self) -> int:
        """Remove every expired entry and return how many were removed."""
        with self._lock:
            now = self._clock()
            expired_keys = [
                key for key, entry in self._entries.items()
                if self._is_expired(entry, now)
            ]
            for key in expired_keys:
                del self._entries[key]
            self.expirations += len(expired_keys)
        if expired_keys:
            logger.debug(f"Cache cleanup removed {len(expired_keys)} expired entries")
        return len(expired_keys)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: Hashable) -> bool:
        return self.contains(key)

    # ========================================================================
    # MEMOIZATION
    # ========================================================================

    async def get_or_compute(self, inputs: CacheInputs, backend_call: BackendCall) -> Any:
        """
        Return the cached answer for ``inputs`` or compute and cache it.

        On a hit ``backend_call`` is never invoked. On a miss it is called
        with ``inputs``; its failure propagates unchanged and nothing is
        cached. No lock is held while the backend runs.

        Args:
            inputs: Request inputs the key is derived from
            backend_call: Callable performing the real request, sync or async

        Returns:
            Cached or freshly computed backend response

        Example:
            inputs = CacheInputs("list files", history, "en")
            command = await cache.get_or_compute(inputs, backend.generate)
        """
        key = inputs.cache_key

        with self._lock:
            value = self._get_fresh(key)
            if value is not _MISSING:
                self.hits += 1
                logger.debug(f"Cache hit: {key[:16]}")
                return value
            self.misses += 1
            generation = self._generation

            if self.config.coalesce_requests:
                pending = self._in_flight.get(key)
                if pending is None:
                    pending = asyncio.ensure_future(self._compute_and_store(key, inputs, backend_call, generation))
                    self._in_flight[key] = pending
                    pending.add_done_callback(
                        lambda done, k=key: self._forget_in_flight(k, done)
                    )
                else:
                    logger.debug(f"Joining in-flight request: {key[:16]}")

        logger.debug(f"Cache miss: {key[:16]}")
        if self.config.coalesce_requests:
            # shield: a cancelled waiter must not cancel the shared request
            return await asyncio.shield(pending)
        return await self._compute_and_store(key, inputs, backend_call, generation)

    async def _compute_and_store(
        self,
        key: Hashable,
        inputs: CacheInputs,
        backend_call: BackendCall,
        generation: int,
    ) -> Any:
        try:
            result = backend_call(inputs)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.debug(f"Backend call failed, nothing cached for {str(key)[:16]}: {e!r}")
            raise
        self.store(key, result, generation)
        return result

    def _forget_in_flight(self, key: Hashable, task: "asyncio.Future[Any]") -> None:
        with self._lock:
            if self._in_flight.get(key) is task:
                del self._in_flight[key]
        # waiters receive the failure through shield(); mark it retrieved
        # so a request whose waiters were all cancelled does not warn
        if not task.cancelled():
            task.exception()

    # ========================================================================
    # METRICS
    # ========================================================================

    def stats(self) -> Dict[str, Any]:
        """Return hit/miss counters and current occupancy."""
        with self._lock:
            lookups = self.hits + self.misses
            return {
                "size": len(self._entries),
                "max_size": self.config.max_size,
                "ttl_seconds": self.config.ttl_seconds,
                "hits": self.hits,
                "misses": self.misses,
                "hit_rate": self.hits / lookups if lookups else 0.0,
                "evictions": self.evictions,
                "expirations": self.expirations,
                "in_flight": len(self._in_flight),
            }

    def reset_stats(self) -> None:
        """Zero the counters; entries are left untouched."""
        with self._lock:
            self.hits = 0
            self.misses = 0
            self.evictions = 0
            self.expirations = 0

"""
Mockup reference caches.

Values are keyed by the deterministic mockup cache key, so concurrent
writes for one key always carry the same value and last writer wins.
"""

import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Optional, Tuple
from loguru import logger

from .config import AppConfig
from .errors import ConfigurationError


class MockupCache:
    """Key-value cache interface used by the mockup composer"""

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        raise NotImplementedError


class NullMockupCache(MockupCache):
    """Cache that never stores anything"""

    def get(self, key: str) -> Optional[Any]:
        return None

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        pass


class InMemoryMockupCache(MockupCache):
    """Process-local cache with per-entry TTL and a bounded entry count"""

    def __init__(self, default_ttl: Optional[float] = None, max_entries: int = 1024,
                 clock: Callable[[], float] = time.monotonic):
        if max_entries < 1:
            raise ConfigurationError("Mockup cache needs room for at least one entry",
                                     details={'max_entries': max_entries})
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[Optional[float], Any]]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            expires_at, value = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._entries[key]
                return None

            self._entries.move_to_end(key)
            return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        expires_at = self._clock() + ttl if ttl else None

        with self._lock:
            self._entries[key] = (expires_at, value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted mockup cache entry {evicted}")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


def create_mockup_cache(config: AppConfig) -> MockupCache:
    """Build the cache backend named in the configuration"""
    backend = config.MOCKUP_CACHE_BACKEND.lower()

    if backend == 'memory':
        logger.info(f"Using in-memory mockup cache (ttl={config.MOCKUP_CACHE_TTL_SECONDS}s, "
                    f"max_entries={config.MOCKUP_CACHE_MAX_ENTRIES})")
        return InMemoryMockupCache(
            default_ttl=config.MOCKUP_CACHE_TTL_SECONDS,
            max_entries=config.MOCKUP_CACHE_MAX_ENTRIES,
        )
    if backend == 'none':
        logger.info("Mockup caching disabled")
        return NullMockupCache()

    raise ConfigurationError(
        f"Unknown mockup cache backend: {config.MOCKUP_CACHE_BACKEND}",
        details={'backend': config.MOCKUP_CACHE_BACKEND},
        suggestions=["Set MOCKUP_CACHE_BACKEND to 'memory' or 'none'"]
    )

"""
Process-wide caches for record descriptors and column positions.

Descriptors are stored in an unbounded cache that is never evicted, one entry
per record type ever mapped. Column position sequences live in a bounded LRU
cache since result shapes are open-ended.
"""
import functools
import logging
import math
import threading

import cachetools

logger = logging.getLogger(__name__)


class Cache:
    """Cache manager for the mapping layer.

    Thread-safe singleton holding named cachetools caches.
    """

    _instance = None
    _caches: dict[str, cachetools.Cache] = {}
    _lock = threading.RLock()

    @classmethod
    def get_instance(cls) -> 'Cache':
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def get_cache(self, name: str, maxsize: float = math.inf) -> cachetools.Cache:
        """Get or create a cache with the given name.

        An infinite maxsize gives a plain never-evicting cache, anything
        else an LRU cache of that size.
        """
        if name not in self._caches:
            with self._lock:
                if name not in self._caches:
                    if maxsize == math.inf:
                        self._caches[name] = cachetools.Cache(maxsize=maxsize)
                    else:
                        self._caches[name] = cachetools.LRUCache(maxsize=maxsize)
        return self._caches[name]

    def clear_all(self) -> None:
        """Clear all managed caches."""
        with self._lock:
            for cache in self._caches.values():
                cache.clear()

    def clear_cache(self, name: str) -> None:
        """Clear a specific cache by name."""
        with self._lock:
            if name in self._caches:
                self._caches[name].clear()


def memoized(cache_name: str, key=cachetools.keys.hashkey, maxsize: float = math.inf):
    """Decorator storing results in a named process-wide cache.

    Hits on an unbounded cache take no lock (LRU reads reorder entries and
    always lock). On a miss the lock is taken, the entry is checked again and
    only then computed, so concurrent first callers share one stored result.
    Exceptions are propagated and never stored.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            manager = Cache.get_instance()
            cache = manager.get_cache(cache_name, maxsize=maxsize)
            k = key(*args, **kwargs)
            if maxsize == math.inf:
                try:
                    return cache[k]
                except KeyError:
                    pass
            with manager.lock:
                try:
                    return cache[k]
                except KeyError:
                    pass
                logger.debug(f'Cache miss for {func.__name__} in {cache_name}')
                result = func(*args, **kwargs)
                cache[k] = result
                return result
        return wrapper
    return decorator

"""Expiring key/value cache for configuration mappings.

:class:`ConfigurationCache` stores one :class:`~sprest.models.CacheRecord`
per key in any :class:`~collections.abc.MutableMapping` and checks expiry
against an injectable clock, so tests can move time forward
deterministically. :class:`DiskConfigurationCache` uses a
:class:`diskcache.Cache` directory as the mapping so cached configuration
survives between CLI runs.

A process-wide default instance is available through
:func:`get_default_cache`; callers that need isolation pass their own
instance to :class:`~sprest.configuration.caching.CachingConfigurationProvider`.

Record replacement happens under a :class:`threading.Lock`: readers either
see the previous record or the new one, never a partially written one.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any, Callable, Optional

import diskcache

from sprest.models import CacheConfig, CacheRecord

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class ConfigurationCache:
    """Key → :class:`~sprest.models.CacheRecord` store with TTL-based expiry.

    Args:
        store: Backing mapping. Values are stored as plain dicts (the
            record's JSON dump). Defaults to an in-memory ``dict``.
        clock: Returns the current time in epoch seconds. Defaults to
            :func:`time.time`.
        ttl_seconds: TTL applied by :meth:`put` when the caller does not
            pass one.

    Example::

        cache = ConfigurationCache(clock=lambda: 1000.0, ttl_seconds=60)
        cache.put("splist_https://contoso/_api/web+config", {"A": "1"})
        record = cache.get("splist_https://contoso/_api/web+config")
        assert record.value == {"A": "1"}
    """

    def __init__(
        self,
        store: Optional[MutableMapping[str, Any]] = None,
        clock: Clock = time.time,
        ttl_seconds: int = 300,
    ) -> None:
        self._store: MutableMapping[str, Any] = store if store is not None else {}
        self._clock = clock
        self._ttl_seconds = ttl_seconds
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> int:
        """Lifetime given to records stored without an explicit TTL."""
        return self._ttl_seconds

    def now(self) -> float:
        """Return the current time from the injected clock, in epoch seconds."""
        return self._clock()

    def get(self, key: str) -> Optional[CacheRecord]:
        """Return the unexpired record stored under *key*, or ``None``.

        Expired records are evicted as a side effect.
        """
        with self._lock:
            raw = self._store.get(key)
            if raw is None:
                return None
            record = CacheRecord.model_validate(raw)
            if record.is_expired(self._clock()):
                logger.debug("Cache record %s expired", key)
                self._store.pop(key, None)
                return None
            return record

    def put(
        self,
        key: str,
        value: dict[str, str],
        ttl_seconds: Optional[float] = None,
    ) -> CacheRecord:
        """Store *value* under *key*, replacing any previous record wholesale.

        Args:
            key: Cache slot.
            value: The mapping to cache; it is copied.
            ttl_seconds: Lifetime of the record; defaults to the cache's TTL.

        Returns:
            The stored :class:`~sprest.models.CacheRecord`.
        """
        ttl = self._ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            record = CacheRecord(key=key, value=dict(value), expiration=self._clock() + ttl)
            self._store[key] = record.model_dump(mode="json")
        return record

    def invalidate(self, key: str) -> None:
        """Remove the record stored under *key*, if any."""
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        """Remove all records."""
        with self._lock:
            self._store.clear()

    def stats(self) -> dict[str, Any]:
        """Return ``size`` (number of stored records) and ``ttl_seconds``."""
        return {"size": len(self._store), "ttl_seconds": self._ttl_seconds}

    def close(self) -> None:
        """Release backing resources. A no-op for in-memory stores."""


class DiskConfigurationCache(ConfigurationCache):
    """A :class:`ConfigurationCache` persisted in a :mod:`diskcache` directory.

    Args:
        cache_dir: Root directory for the cache. A ``configuration/``
            subdirectory is created inside it.
        config: Cache configuration; ``ttl_seconds`` is the default TTL.
        clock: Returns the current time in epoch seconds.
    """

    def __init__(
        self,
        cache_dir: str | Path,
        config: CacheConfig,
        clock: Clock = time.time,
    ) -> None:
        self._cache_dir = Path(cache_dir)
        self._disk = diskcache.Cache(str(self._cache_dir / "configuration"))
        super().__init__(store=self._disk, clock=clock, ttl_seconds=config.ttl_seconds)

    def stats(self) -> dict[str, Any]:
        """Return the base stats plus the cache ``directory``."""
        stats = super().stats()
        stats["directory"] = str(self._cache_dir / "configuration")
        return stats

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache`."""
        self._disk.close()


# ------------------------------------------------------------------ #
# Process-wide default cache
# ------------------------------------------------------------------ #

_default_cache: Optional[ConfigurationCache] = None


def get_default_cache() -> ConfigurationCache:
    """Return the process-wide :class:`ConfigurationCache`, creating an in-memory one lazily."""
    global _default_cache
    if _default_cache is None:
        _default_cache = ConfigurationCache()
    return _default_cache


def set_default_cache(cache: ConfigurationCache) -> None:
    """Install *cache* as the process-wide default."""
    global _default_cache
    _default_cache = cache


def reset_default_cache() -> None:
    """Drop the process-wide default cache (closing it first).

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _default_cache
    if _default_cache is not None:
        _default_cache.close()
    _default_cache = None

"""Caching decorator for configuration providers."""

from __future__ import annotations

import logging
from typing import Optional

from sprest.cache import ConfigurationCache, get_default_cache
from sprest.configuration.provider import ConfigurationProvider

logger = logging.getLogger(__name__)


class CachingConfigurationProvider(ConfigurationProvider):
    """Serve another provider's configuration from a :class:`ConfigurationCache`.

    A hit returns the cached mapping without calling the wrapped provider.
    A miss (no record, or an expired one) loads from the wrapped provider
    and stores the result for *ttl_seconds*. Failed loads propagate
    unchanged and leave the cache untouched; an expired record is never
    served as a fallback.

    Concurrent misses on the same key each load independently and the last
    one to finish owns the slot.

    Args:
        inner: The provider to load from on a miss.
        cache_key: Cache slot shared by equivalent providers.
        ttl_seconds: Lifetime of stored records. Defaults to the cache's TTL.
        cache: Cache to use. Defaults to :func:`~sprest.cache.get_default_cache`,
            resolved on each call.
    """

    def __init__(
        self,
        inner: ConfigurationProvider,
        cache_key: str,
        ttl_seconds: Optional[float] = None,
        cache: Optional[ConfigurationCache] = None,
    ) -> None:
        self._inner = inner
        self._cache_key = cache_key
        self._ttl_seconds = ttl_seconds
        self._cache = cache

    @property
    def inner(self) -> ConfigurationProvider:
        return self._inner

    @property
    def cache_key(self) -> str:
        return self._cache_key

    @property
    def cache(self) -> ConfigurationCache:
        """The cache in use: the one given at construction, or the process default."""
        return self._cache if self._cache is not None else get_default_cache()

    def get_configuration(self) -> dict[str, str]:
        """Return the cached mapping, loading it from the wrapped provider on a miss.

        Returns:
            A fresh copy of the configuration mapping.

        Raises:
            SprestError: Whatever the wrapped provider raises; nothing is
                cached in that case.
        """
        cache = self.cache
        record = cache.get(self._cache_key)
        if record is not None:
            logger.debug("Configuration cache hit: %s", self._cache_key)
            return dict(record.value)

        logger.debug("Configuration cache miss: %s", self._cache_key)
        value = self._inner.get_configuration()
        cache.put(self._cache_key, value, self._ttl_seconds)
        return dict(value)

    def __repr__(self) -> str:
        return f"CachingConfigurationProvider({self._inner!r}, {self._cache_key!r})"

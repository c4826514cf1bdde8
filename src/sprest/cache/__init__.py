"""Configuration caching for sprest.

This package provides :class:`ConfigurationCache`, an expiring key/value
store used by
:class:`~sprest.configuration.caching.CachingConfigurationProvider`, and
:class:`DiskConfigurationCache`, its :mod:`diskcache`-backed variant. The
``cache`` section of the global configuration
(:class:`~sprest.models.CacheConfig`) controls TTL and persistence.
"""

from sprest.cache.cache import (
    ConfigurationCache,
    DiskConfigurationCache,
    get_default_cache,
    reset_default_cache,
    set_default_cache,
)

__all__ = [
    "ConfigurationCache",
    "DiskConfigurationCache",
    "get_default_cache",
    "reset_default_cache",
    "set_default_cache",
]

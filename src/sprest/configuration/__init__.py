"""Configuration providers.

A :class:`ConfigurationProvider` returns a ``{name: value}`` mapping of
strings. :class:`SPListConfigurationProvider` reads it from a list;
:class:`CachingConfigurationProvider` puts a
:class:`~sprest.cache.ConfigurationCache` in front of any provider, and
:class:`Settings` collects the results.
"""

from sprest.configuration.caching import CachingConfigurationProvider
from sprest.configuration.provider import ConfigurationProvider
from sprest.configuration.settings import Settings
from sprest.configuration.splist import SPListConfigurationProvider

__all__ = [
    "CachingConfigurationProvider",
    "ConfigurationProvider",
    "SPListConfigurationProvider",
    "Settings",
]

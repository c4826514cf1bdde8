"""Abstract base class for configuration sources."""

from __future__ import annotations

from abc import ABC, abstractmethod


class ConfigurationProvider(ABC):
    """A source of string settings keyed by name.

    Subclasses must implement :meth:`get_configuration`. Providers load
    fresh data on every call; wrap one in
    :class:`~sprest.configuration.caching.CachingConfigurationProvider` to
    cache it.
    """

    @abstractmethod
    def get_configuration(self) -> dict[str, str]:
        """Load the configuration mapping.

        Raises:
            ConfigurationLoadError: If the source is unreachable.
            MalformedResponseError: If the source returned unusable data.
        """
        ...

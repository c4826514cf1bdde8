"""Configuration read from the Title/Value columns of a SharePoint list."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from pydantic import ValidationError

from sprest.configuration.caching import CachingConfigurationProvider
from sprest.configuration.provider import ConfigurationProvider
from sprest.exceptions import ConfigurationLoadError, MalformedResponseError, RequestError
from sprest.models import ConfigurationEntry

if TYPE_CHECKING:
    from sprest.cache import ConfigurationCache
    from sprest.rest.webs import Web

logger = logging.getLogger(__name__)


class SPListConfigurationProvider(ConfigurationProvider):
    """Read configuration from a list where ``Title`` is the key and ``Value`` the value.

    Args:
        source_web: The web holding the list.
        source_list_title: Title of the list. Defaults to ``config``.

    Example::

        provider = SPListConfigurationProvider(SPRest(client).web, "Settings")
        settings = provider.as_caching(ttl_seconds=60).get_configuration()
    """

    def __init__(self, source_web: Web, source_list_title: str = "config") -> None:
        self._web = source_web
        self._list_title = source_list_title

    @property
    def web(self) -> Web:
        return self._web

    @property
    def list_title(self) -> str:
        return self._list_title

    def get_configuration(self) -> dict[str, str]:
        """Load every row of the list as ``{Title: Value}``.

        Raises:
            ConfigurationLoadError: If the list could not be read; the
                underlying :class:`~sprest.exceptions.RequestError` is
                chained as ``__cause__``.
            MalformedResponseError: If the payload is not a list of rows or
                a row has no ``Title``.
        """
        items = self._web.lists.get_by_title(self._list_title).items.select("Title", "Value")
        try:
            data = items.get()
        except RequestError as exc:
            raise ConfigurationLoadError(
                f"Could not load configuration from list '{self._list_title}': {exc}"
            ) from exc

        rows = _rows(data)
        try:
            entries = [ConfigurationEntry.model_validate(row) for row in rows]
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Configuration list '{self._list_title}' has an invalid row: {exc}"
            ) from exc

        logger.debug("Loaded %d settings from list '%s'", len(entries), self._list_title)
        return {entry.title: entry.value for entry in entries}

    def as_caching(
        self,
        ttl_seconds: Optional[float] = None,
        cache: Optional[ConfigurationCache] = None,
    ) -> CachingConfigurationProvider:
        """Wrap this provider in a :class:`CachingConfigurationProvider`.

        The cache key combines the web URL and the list title, so two
        providers for the same list share cached data.
        """
        key = f"splist_{self._web.to_url()}+{self._list_title}"
        return CachingConfigurationProvider(self, key, ttl_seconds=ttl_seconds, cache=cache)

    def __repr__(self) -> str:
        return f"SPListConfigurationProvider({self._web.to_url()!r}, {self._list_title!r})"


def _rows(data: Any) -> list[Any]:
    """Find the row array in a payload: a bare array, or one under ``value``/``results``/``d``."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        if "d" in data:
            return _rows(data["d"])
        for key in ("value", "results"):
            if isinstance(data.get(key), list):
                return data[key]
    raise MalformedResponseError(
        f"Expected an array of configuration rows, got {type(data).__name__}"
    )

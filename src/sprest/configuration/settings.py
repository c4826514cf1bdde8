"""In-memory settings collection fed by configuration providers."""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from typing import Any, Optional

from sprest.configuration.provider import ConfigurationProvider
from sprest.exceptions import MalformedResponseError


class Settings:
    """A string key/value store that configuration providers load into.

    Values are always strings; :meth:`add_json` and :meth:`get_json` store
    structured values as JSON text.

    Example::

        settings = Settings()
        settings.load(SPListConfigurationProvider(web).as_caching())
        timeout = int(settings.get("Timeout", "30"))
    """

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def add(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value."""
        self._values[key] = value

    def add_json(self, key: str, value: Any) -> None:
        """Store *value* under *key* as JSON text.

        Args:
            key: Setting name.
            value: Any JSON-serialisable value.
        """
        self._values[key] = json.dumps(value)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return the string stored under *key*, or *default*."""
        return self._values.get(key, default)

    def get_json(self, key: str) -> Any:
        """Decode the value stored under *key* as JSON; ``None`` if the key is absent.

        Raises:
            MalformedResponseError: If the stored value is not valid JSON.
        """
        raw = self._values.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MalformedResponseError(f"Setting '{key}' is not valid JSON: {exc}") from exc

    def apply(self, values: Mapping[str, str]) -> None:
        """Merge *values* in, overwriting existing keys."""
        self._values.update(values)

    def load(self, provider: ConfigurationProvider) -> None:
        """Merge in everything *provider* returns. Errors from the provider propagate."""
        self.apply(provider.get_configuration())

    def as_dict(self) -> dict[str, str]:
        """Return a copy of all settings."""
        return dict(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

"""Abstract base class for authentication strategies.

This module defines the two foundational types of the auth subsystem:

- :class:`AuthResult` -- a plain container for the HTTP headers and query
  parameters that a strategy produces.
- :class:`AuthPlugin` -- the abstract base class every strategy extends.

To add a strategy, subclass :class:`AuthPlugin`, set the
:attr:`~AuthPlugin.auth_type` property, implement
:meth:`~AuthPlugin.authenticate`, and register an instance with
:class:`~sprest.auth.manager.AuthManager`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from sprest.models import AuthConfig


class AuthResult:
    """Container for authentication artifacts to inject into HTTP requests.

    Merged into every outgoing request by
    :class:`~sprest.client.sync_client.SyncClient`.

    Args:
        headers: HTTP headers to add (e.g. ``{"Authorization": "Bearer ..."}``).
        params: Query-string parameters to add.

    Example::

        result = AuthResult(headers={"Authorization": "Bearer tok123"})
        assert result.headers["Authorization"] == "Bearer tok123"
    """

    def __init__(
        self,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ):
        self.headers = headers or {}
        self.params = params or {}


class AuthPlugin(ABC):
    """Abstract base class for authentication strategies.

    Strategies are registered with :class:`~sprest.auth.manager.AuthManager`
    and looked up by their ``auth_type`` at runtime.
    """

    @property
    @abstractmethod
    def auth_type(self) -> str:
        """Return the unique auth type identifier this strategy handles (e.g. ``"bearer"``)."""
        ...

    @abstractmethod
    def authenticate(self, auth_config: AuthConfig) -> AuthResult:
        """Resolve credentials and return auth artifacts for HTTP requests.

        Args:
            auth_config: The authentication section of the active profile.

        Returns:
            An :class:`AuthResult` containing headers and/or params to inject.

        Raises:
            AuthError: If credentials cannot be resolved or are invalid.
        """
        ...

    def validate_config(self, auth_config: AuthConfig) -> list[str]:
        """Validate the auth configuration before use.

        Returns:
            A list of error message strings. An empty list means the
            configuration is valid.
        """
        return []

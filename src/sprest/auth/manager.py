"""Auth manager -- registry and dispatcher for auth strategies.

:class:`AuthManager` maps auth-type strings (``"bearer"``, ``"basic"``) to
:class:`~sprest.auth.base.AuthPlugin` instances and exposes a single
:meth:`~AuthManager.authenticate` method that
:class:`~sprest.client.sync_client.SyncClient` calls once per session.

Call :func:`create_default_manager` for a manager pre-loaded with the
built-in strategies.
"""

from __future__ import annotations

from sprest.auth.base import AuthPlugin, AuthResult
from sprest.exceptions import AuthError
from sprest.models import Profile


class AuthManager:
    """Registry and dispatcher for authentication strategies.

    Example::

        manager = AuthManager()
        manager.register(BearerAuthPlugin())
        result = manager.authenticate(profile)
    """

    def __init__(self) -> None:
        self._plugins: dict[str, AuthPlugin] = {}

    def register(self, plugin: AuthPlugin) -> None:
        """Register a strategy keyed by its ``auth_type``, replacing any previous one."""
        self._plugins[plugin.auth_type] = plugin

    def get_plugin(self, auth_type: str) -> AuthPlugin:
        """Retrieve a registered strategy by its auth type identifier.

        Raises:
            AuthError: If no strategy is registered for *auth_type*.
        """
        plugin = self._plugins.get(auth_type)
        if plugin is None:
            available = ", ".join(sorted(self._plugins)) or "(none)"
            raise AuthError(
                f"No auth plugin registered for type '{auth_type}'. "
                f"Available types: {available}"
            )
        return plugin

    def authenticate(self, profile: Profile) -> AuthResult:
        """Authenticate using the profile's auth configuration.

        Returns an empty :class:`~sprest.auth.base.AuthResult` when the
        profile has no auth section.

        Raises:
            AuthError: If the auth type has no registered strategy, or if the
                strategy itself rejects the credentials.
        """
        if profile.auth is None:
            return AuthResult()
        plugin = self.get_plugin(profile.auth.type)
        return plugin.authenticate(profile.auth)

    def list_types(self) -> list[str]:
        return sorted(self._plugins.keys())


def create_default_manager() -> AuthManager:
    """Create an :class:`AuthManager` with the ``bearer`` and ``basic`` strategies."""
    from sprest.auth.basic import BasicAuthPlugin
    from sprest.auth.bearer import BearerAuthPlugin

    manager = AuthManager()
    manager.register(BearerAuthPlugin())
    manager.register(BasicAuthPlugin())
    return manager

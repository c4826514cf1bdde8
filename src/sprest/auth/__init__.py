"""Pluggable authentication for sprest.

- :class:`AuthPlugin` -- abstract base class for auth strategies.
- :class:`AuthManager` -- registry that maps auth type strings to strategies
  and authenticates a :class:`~sprest.models.Profile`.
- :func:`create_default_manager` -- a manager with ``bearer`` and ``basic``.

Typical usage::

    from sprest.auth import create_default_manager

    manager = create_default_manager()
    auth_result = manager.authenticate(profile)
"""

from sprest.auth.base import AuthPlugin, AuthResult
from sprest.auth.manager import AuthManager, create_default_manager

__all__ = [
    "AuthPlugin",
    "AuthResult",
    "AuthManager",
    "create_default_manager",
]

"""HTTP Basic authentication, for on-premises sites that allow it."""

from __future__ import annotations

import base64

from sprest.auth.base import AuthPlugin, AuthResult
from sprest.config import resolve_credential
from sprest.exceptions import AuthError
from sprest.models import AuthConfig


class BasicAuthPlugin(AuthPlugin):
    """Authenticate via HTTP Basic authentication.

    The credential source must resolve to a ``"username:password"`` string,
    which is Base64-encoded into an ``Authorization: Basic <encoded>`` header.
    """

    @property
    def auth_type(self) -> str:
        return "basic"

    def authenticate(self, auth_config: AuthConfig) -> AuthResult:
        """Resolve the credential and return a Basic auth header.

        Raises:
            AuthError: If the resolved credential has no colon separator.
        """
        raw = resolve_credential(auth_config.source)
        if ":" not in raw:
            raise AuthError(
                "Basic auth credential must be in 'username:password' format "
                "(colon separator is required)"
            )
        encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
        return AuthResult(headers={"Authorization": f"Basic {encoded}"})

    def validate_config(self, auth_config: AuthConfig) -> list[str]:
        errors: list[str] = []
        if not auth_config.source:
            errors.append("Basic auth requires a 'source' for the credential")
        return errors

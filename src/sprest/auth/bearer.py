"""Bearer token authentication.

A pre-existing access token (for example one issued by Entra ID for the
SharePoint resource) is resolved from the configured ``source`` and sent as
``Authorization: Bearer <token>``. No token exchange or refresh happens here.
"""

from __future__ import annotations

from sprest.auth.base import AuthPlugin, AuthResult
from sprest.config import resolve_credential
from sprest.models import AuthConfig


class BearerAuthPlugin(AuthPlugin):
    """Authenticate via Bearer token in the Authorization header."""

    @property
    def auth_type(self) -> str:
        return "bearer"

    def authenticate(self, auth_config: AuthConfig) -> AuthResult:
        token = resolve_credential(auth_config.source)
        return AuthResult(headers={"Authorization": f"Bearer {token}"})

    def validate_config(self, auth_config: AuthConfig) -> list[str]:
        errors: list[str] = []
        if not auth_config.source:
            errors.append("Bearer auth requires a 'source' for the token")
        return errors

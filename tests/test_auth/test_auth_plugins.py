"""Tests for auth strategies, AuthManager, and AuthResult."""

from __future__ import annotations

import base64

import pytest

from sprest.auth.base import AuthPlugin, AuthResult
from sprest.auth.basic import BasicAuthPlugin
from sprest.auth.bearer import BearerAuthPlugin
from sprest.auth.manager import AuthManager, create_default_manager
from sprest.exceptions import AuthError, ConfigError
from sprest.models import AuthConfig, Profile


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_profile(auth: AuthConfig | None = None) -> Profile:
    return Profile(name="test", site_url="https://contoso.sharepoint.com/sites/dev", auth=auth)


def _basic_header(raw: str) -> str:
    return "Basic " + base64.b64encode(raw.encode("utf-8")).decode("ascii")


class _StaticPlugin(AuthPlugin):
    def __init__(self, auth_type: str = "static") -> None:
        self._type = auth_type

    @property
    def auth_type(self) -> str:
        return self._type

    def authenticate(self, auth_config: AuthConfig) -> AuthResult:
        return AuthResult(headers={"X-Static": self._type})


# ---------------------------------------------------------------------------
# AuthResult
# ---------------------------------------------------------------------------


class TestAuthResult:
    def test_defaults_are_empty_dicts(self) -> None:
        result = AuthResult()
        assert result.headers == {}
        assert result.params == {}

    def test_custom_values(self) -> None:
        result = AuthResult(headers={"Authorization": "Bearer x"}, params={"key": "val"})
        assert result.headers == {"Authorization": "Bearer x"}
        assert result.params == {"key": "val"}


# ---------------------------------------------------------------------------
# Bearer
# ---------------------------------------------------------------------------


class TestBearerAuthPlugin:
    def test_auth_type(self) -> None:
        assert BearerAuthPlugin().auth_type == "bearer"

    def test_bearer_token_in_header(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SP_TOKEN", "eyJ0eXAi")
        result = BearerAuthPlugin().authenticate(AuthConfig(type="bearer", source="env:SP_TOKEN"))
        assert result.headers == {"Authorization": "Bearer eyJ0eXAi"}
        assert result.params == {}

    def test_bearer_from_file(self, tmp_path) -> None:
        token_file = tmp_path / "token"
        token_file.write_text("file-token\n", encoding="utf-8")
        result = BearerAuthPlugin().authenticate(AuthConfig(type="bearer", source=f"file:{token_file}"))
        assert result.headers["Authorization"] == "Bearer file-token"

    def test_missing_env_raises_config_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SP_TOKEN", raising=False)
        with pytest.raises(ConfigError, match="SP_TOKEN"):
            BearerAuthPlugin().authenticate(AuthConfig(type="bearer", source="env:SP_TOKEN"))

    def test_validate_valid(self) -> None:
        assert BearerAuthPlugin().validate_config(AuthConfig(type="bearer", source="env:X")) == []

    def test_validate_missing_source(self) -> None:
        errors = BearerAuthPlugin().validate_config(AuthConfig(type="bearer", source=""))
        assert len(errors) == 1
        assert "source" in errors[0]


# ---------------------------------------------------------------------------
# Basic
# ---------------------------------------------------------------------------


class TestBasicAuthPlugin:
    def test_auth_type(self) -> None:
        assert BasicAuthPlugin().auth_type == "basic"

    def test_basic_auth_encoding(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SP_CRED", "CONTOSO\\svc:p@ss")
        result = BasicAuthPlugin().authenticate(AuthConfig(type="basic", source="env:SP_CRED"))
        assert result.headers == {"Authorization": _basic_header("CONTOSO\\svc:p@ss")}

    def test_basic_auth_with_colon_in_password(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SP_CRED", "user:pa:ss")
        result = BasicAuthPlugin().authenticate(AuthConfig(type="basic", source="env:SP_CRED"))
        assert result.headers["Authorization"] == _basic_header("user:pa:ss")

    def test_basic_auth_no_colon_raises_auth_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SP_CRED", "justauser")
        with pytest.raises(AuthError, match="username:password"):
            BasicAuthPlugin().authenticate(AuthConfig(type="basic", source="env:SP_CRED"))

    def test_validate_missing_source(self) -> None:
        assert BasicAuthPlugin().validate_config(AuthConfig(type="basic", source="")) != []


# ---------------------------------------------------------------------------
# AuthManager
# ---------------------------------------------------------------------------


class TestAuthManager:
    def test_register_and_get_plugin(self) -> None:
        manager = AuthManager()
        plugin = _StaticPlugin()
        manager.register(plugin)
        assert manager.get_plugin("static") is plugin

    def test_get_unknown_type_lists_available(self) -> None:
        manager = AuthManager()
        manager.register(_StaticPlugin("b"))
        manager.register(_StaticPlugin("a"))
        with pytest.raises(AuthError, match="Available types: a, b"):
            manager.get_plugin("ntlm")

    def test_get_unknown_type_empty_registry(self) -> None:
        with pytest.raises(AuthError, match=r"\(none\)"):
            AuthManager().get_plugin("bearer")

    def test_register_overwrites_existing(self) -> None:
        manager = AuthManager()
        manager.register(_StaticPlugin())
        replacement = _StaticPlugin()
        manager.register(replacement)
        assert manager.get_plugin("static") is replacement

    def test_authenticate_with_profile_auth(self) -> None:
        manager = AuthManager()
        manager.register(_StaticPlugin())
        result = manager.authenticate(_make_profile(AuthConfig(type="static")))
        assert result.headers == {"X-Static": "static"}

    def test_authenticate_with_no_auth_returns_empty(self) -> None:
        result = AuthManager().authenticate(_make_profile())
        assert result.headers == {}
        assert result.params == {}

    def test_authenticate_with_unknown_type_raises(self) -> None:
        with pytest.raises(AuthError):
            AuthManager().authenticate(_make_profile(AuthConfig(type="ntlm")))


class TestCreateDefaultManager:
    def test_has_builtin_types(self) -> None:
        assert create_default_manager().list_types() == ["basic", "bearer"]

    def test_full_authenticate_flow(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SP_TOKEN", "abc")
        profile = _make_profile(AuthConfig(type="bearer", source="env:SP_TOKEN"))
        result = create_default_manager().authenticate(profile)
        assert result.headers == {"Authorization": "Bearer abc"}

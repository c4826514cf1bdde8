"""Shared test fixtures for sprest.

Provides a recording transport for Queryable tests, isolated config
environments, output state management, and a CLI runner. These fixtures
are automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import httpx
import pytest

from sprest.cache import reset_default_cache
from sprest.models import AuthConfig, Profile, RequestConfig
from sprest.output import OutputFormat, OutputManager, reset_output, set_output


SITE_URL = "https://contoso.sharepoint.com/sites/dev"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_globals_between_tests() -> None:
    """Reset the global OutputManager and default cache after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file"). Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()
    reset_default_cache()


# ---------------------------------------------------------------------------
# Recording transport
# ---------------------------------------------------------------------------


@dataclass
class RecordedCall:
    method: str
    url: str
    headers: dict[str, str]
    body: Union[str, bytes, None]

    def json(self) -> Any:
        return json.loads(self.body) if self.body is not None else None


@dataclass
class RecordingTransport:
    """Transport stand-in that records calls and replays queued responses.

    With nothing queued, requests are answered with ``204 No Content``.
    """

    calls: list[RecordedCall] = field(default_factory=list)
    responses: list[Union[httpx.Response, Exception]] = field(default_factory=list)

    def queue(self, data: Any = None, status_code: int = 200, text: Optional[str] = None) -> None:
        if text is not None:
            self.responses.append(httpx.Response(status_code, text=text))
        elif data is None:
            self.responses.append(httpx.Response(status_code))
        else:
            self.responses.append(httpx.Response(status_code, json=data))

    def fail_with(self, exc: Exception) -> None:
        self.responses.append(exc)

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
        body: Union[str, bytes, None] = None,
    ) -> httpx.Response:
        self.calls.append(RecordedCall(method, url, dict(headers or {}), body))
        if not self.responses:
            return httpx.Response(204)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last(self) -> RecordedCall:
        return self.calls[-1]


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


# ---------------------------------------------------------------------------
# Profile fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_profile() -> Profile:
    """A profile for the dev site with bearer auth and fast retry settings."""
    return Profile(
        name="dev",
        site_url=SITE_URL,
        auth=AuthConfig(type="bearer", source="env:SP_TOKEN"),
        request=RequestConfig(timeout=5, max_retries=1),
    )


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_CACHE_HOME to subdirectories of tmp_path
    so that tests never touch real user config. Clears all SPREST_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("sprest.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))

    for var in ["SPREST_PROFILE", "SPREST_SITE_URL", "SPREST_CONFIG_LIST"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()

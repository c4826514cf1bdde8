"""Where sprest keeps its settings, and how the active site profile is chosen.

Three kinds of file are involved:

* ``config.json`` in the user config directory, a
  :class:`~sprest.models.GlobalConfig` with output and cache defaults.
* ``profiles/<name>.json``, one :class:`~sprest.models.Profile` per
  SharePoint site: its URL, credentials and configuration list.
* ``./sprest.json`` in the working directory, a project file that can pin
  ``default_profile``, ``site_url`` or ``config_list`` for a checkout.

:func:`resolve_config` combines them with the ``--profile``/``--site-url``
flags and the ``SPREST_*`` environment variables into the profile a command
talks to. JSON files are replaced atomically so a crash never leaves a
half-written profile behind.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Any, Optional

from sprest.exceptions import ConfigError
from sprest.models import GlobalConfig, Profile

_APP_NAME = "sprest"
_PROJECT_FILE = "sprest.json"

ENV_PROFILE = "SPREST_PROFILE"
ENV_SITE_URL = "SPREST_SITE_URL"
ENV_CONFIG_LIST = "SPREST_CONFIG_LIST"

# kind -> (XDG variable, default under $HOME, sub-directory of ~/.sprest)
_USER_DIRS = {
    "config": ("XDG_CONFIG_HOME", ".config", ""),
    "cache": ("XDG_CACHE_HOME", ".cache", "cache"),
}


def _is_xdg_platform() -> bool:
    """Return True if the platform follows the XDG Base Directory layout (Linux/FreeBSD)."""
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _user_dir(kind: str) -> Path:
    env_var, home_default, fallback_sub = _USER_DIRS[kind]
    if _is_xdg_platform():
        root = Path(os.environ.get(env_var) or Path.home() / home_default)
        path = root / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / fallback_sub
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Return the directory holding ``config.json`` and ``profiles/``.

    ``$XDG_CONFIG_HOME/sprest`` on Linux and BSD, ``~/.sprest`` elsewhere.
    """
    return _user_dir("config")


def get_cache_dir() -> Path:
    """Return the directory of the persistent configuration cache.

    ``$XDG_CACHE_HOME/sprest`` on Linux and BSD, ``~/.sprest/cache``
    elsewhere. Everything in it may be deleted at any time.
    """
    return _user_dir("cache")


def get_profiles_dir() -> Path:
    path = get_config_dir() / "profiles"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- JSON files ---


def _write_json(path: Path, payload: Any) -> None:
    """Replace *path* with *payload* as indented JSON.

    The document is written to a sibling temp file, synced, then renamed
    over *path*; readers see either the old file or the new one.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
            handle.write("\n")
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _read_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / "config.json"


def load_global_config() -> GlobalConfig:
    """Load ``config.json``, or the defaults when it does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or fails validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist *config* as ``config.json``."""
    _write_json(_global_config_path(), config.model_dump(mode="json"))


# --- Profiles ---


def _profile_path(name: str) -> Path:
    return get_profiles_dir() / f"{name}.json"


def list_profiles() -> list[str]:
    """Return the names of all saved profiles, sorted."""
    return sorted(p.stem for p in get_profiles_dir().glob("*.json") if p.is_file())


def load_profile(name: str) -> Profile:
    """Load the saved profile called *name*.

    Args:
        name: Profile name, the stem of its file under ``profiles/``.

    Returns:
        The validated profile.

    Raises:
        ConfigError: If the profile is missing, not JSON, or invalid.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    data = _read_json(path, f"profile '{name}'")
    try:
        return Profile.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid profile '{name}' at {path}: {exc}") from exc


def save_profile(profile: Profile) -> None:
    """Persist *profile* as ``profiles/<profile.name>.json``."""
    _write_json(_profile_path(profile.name), profile.model_dump(mode="json"))


def delete_profile(name: str) -> None:
    """Remove the saved profile called *name*.

    Raises:
        ConfigError: If the profile does not exist.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    path.unlink()


def profile_exists(name: str) -> bool:
    return _profile_path(name).is_file()


def _same_site(left: str, right: str) -> bool:
    return left.rstrip("/").lower() == right.rstrip("/").lower()


def find_profile_for_site(site_url: str) -> Optional[Profile]:
    """Return the first saved profile (by name) whose ``site_url`` is *site_url*.

    URLs compare without case and without a trailing ``/``. Profiles that
    fail to load are skipped.

    Args:
        site_url: Absolute site URL, e.g. ``https://contoso.sharepoint.com/sites/dev``.

    Returns:
        The matching profile, or ``None``.
    """
    for name in list_profiles():
        try:
            profile = load_profile(name)
        except ConfigError:
            continue
        if _same_site(profile.site_url, site_url):
            return profile
    return None


# --- Project file ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./sprest.json``.

    Recognised keys are ``default_profile``, ``site_url`` and
    ``config_list``; others are ignored.

    Returns:
        The parsed object, or ``None`` when there is no project file.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_FILE
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Resolution ---


def _first(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value:
            return value
    return None


def resolve_config(
    cli_profile: Optional[str] = None,
    cli_site_url: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> tuple[GlobalConfig, Optional[Profile]]:
    """Work out the global config and the site profile a command should use.

    Each setting is taken from the first source that provides it, in the
    order CLI flag, environment, ``./sprest.json``, ``config.json``:

    * profile name: ``--profile``, ``SPREST_PROFILE``, ``default_profile``
      of the project file, then of the global config;
    * site URL: ``--site-url``, ``SPREST_SITE_URL``, ``site_url`` of the
      project file;
    * configuration list: ``SPREST_CONFIG_LIST``, ``config_list`` of the
      project file, then the profile's own value.

    A site URL without a named profile selects the saved profile for that
    site, or an unauthenticated ``adhoc`` profile when none exists. A saved
    profile's credentials are therefore only sent to its own site, unless
    the profile is named explicitly, in which case the site URL overrides
    its ``site_url``. With neither a name nor a site URL, a lone saved
    profile is used when ``auto_select_single_profile`` is on.

    Args:
        cli_profile: Value of ``--profile``.
        cli_site_url: Value of ``--site-url``.
        cli_format: Output format from the CLI, applied to the global config.

    Returns:
        ``(global_config, profile)``; the profile is ``None`` when nothing
        identifies a site.

    Raises:
        ConfigError: If a named profile or a config file cannot be loaded.
    """
    global_cfg = load_global_config()
    project = load_project_config() or {}

    named = _first(cli_profile, os.environ.get(ENV_PROFILE), project.get("default_profile"))
    site_url = _first(cli_site_url, os.environ.get(ENV_SITE_URL), project.get("site_url"))

    profile: Optional[Profile] = None
    if named:
        profile = load_profile(named)
        if site_url:
            profile.site_url = site_url.rstrip("/")
    elif site_url:
        profile = find_profile_for_site(site_url) or Profile(name="adhoc", site_url=site_url)
    elif global_cfg.default_profile:
        profile = load_profile(global_cfg.default_profile)
    elif global_cfg.auto_select_single_profile:
        profiles = list_profiles()
        if len(profiles) == 1:
            profile = load_profile(profiles[0])

    config_list = _first(os.environ.get(ENV_CONFIG_LIST), project.get("config_list"))
    if profile is not None and config_list:
        profile.config_list = config_list

    if cli_format is not None:
        global_cfg.output.format = cli_format

    return global_cfg, profile


# --- Credential sources ---


def resolve_credential(source: str) -> str:
    """Read the secret a profile's ``auth.source`` points at.

    Args:
        source: ``env:VAR`` (an environment variable), ``file:/path`` (file
            content, whitespace stripped) or ``prompt`` (asked for on a TTY).

    Returns:
        The secret.

    Raises:
        ConfigError: If the source is unknown or yields nothing.
    """
    kind, _, target = source.partition(":")
    if kind == "env" and target:
        value = os.environ.get(target)
        if value is None:
            raise ConfigError(f"Environment variable '{target}' is not set (source: {source})")
        return value

    if kind == "file" and target:
        path = Path(target).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError("Cannot prompt for credentials: stdin is not a TTY (source: prompt)")
        return getpass.getpass("Credential for SharePoint: ")

    raise ConfigError(f"Unknown credential source format: {source}")

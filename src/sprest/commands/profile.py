"""Profile commands -- manage per-site connection profiles.

Provides the ``sprest profile`` sub-command group. A profile names one
site URL and stores how to authenticate against it, the request settings,
and the title of the configuration list read by ``sprest settings``.

Typical workflow::

    sprest profile add dev https://contoso.sharepoint.com/sites/dev \\
        --auth bearer --source env:SP_TOKEN
    sprest config set default_profile dev
    sprest settings
"""

from __future__ import annotations

from typing import Optional

import typer

from sprest.output import error, format_response, get_output, info, success


profile_app = typer.Typer(no_args_is_help=True)


@profile_app.command("add")
def profile_add(
    name: str = typer.Argument(help="Profile name."),
    site_url: str = typer.Argument(help="Absolute site URL."),
    auth_type: Optional[str] = typer.Option(
        None, "--auth", "-a", help="Auth type: bearer, basic."
    ),
    source: str = typer.Option(
        "prompt",
        "--source",
        "-s",
        help="Credential source: env:VAR, file:/path, prompt.",
    ),
    config_list: str = typer.Option(
        "config", "--config-list", help="Title of the configuration list."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing profile."),
) -> None:
    """Create a connection profile.

    Example::

        sprest profile add dev https://contoso.sharepoint.com/sites/dev --auth bearer --source env:SP_TOKEN
        sprest profile add onprem https://sp.local --auth basic --source file:~/.sp-credentials
    """
    from sprest.auth import create_default_manager
    from sprest.config import profile_exists, save_profile
    from sprest.exceptions import SprestError
    from sprest.models import AuthConfig, Profile

    if profile_exists(name) and not force:
        error(f'Profile "{name}" already exists. Use --force to overwrite.')
        raise typer.Exit(code=2)

    auth = None
    if auth_type:
        auth = AuthConfig(type=auth_type, source=source)
        try:
            problems = create_default_manager().get_plugin(auth_type).validate_config(auth)
        except SprestError as exc:
            error(str(exc))
            raise typer.Exit(code=2) from None
        if problems:
            for problem in problems:
                error(problem)
            raise typer.Exit(code=2)

    profile = Profile(name=name, site_url=site_url, auth=auth, config_list=config_list)
    save_profile(profile)
    success(f'Profile "{name}" saved.')


@profile_app.command("list")
def profile_list() -> None:
    """List configured profiles.

    Profiles that fail to load are shown with an ``error`` status.
    """
    from sprest.config import list_profiles, load_profile

    profiles = list_profiles()
    if not profiles:
        info("No profiles configured.")
        return

    headers = ["Profile", "Site URL", "Auth Type", "Config List"]
    rows: list[list[str]] = []
    for name in profiles:
        try:
            profile = load_profile(name)
        except Exception:
            rows.append([name, "error", "-", "-"])
            continue
        auth_type = profile.auth.type if profile.auth else "none"
        rows.append([name, profile.site_url, auth_type, profile.config_list])

    get_output().print_table(headers, rows, title="Configured Profiles")


@profile_app.command("show")
def profile_show(
    name: str = typer.Argument(help="Profile name."),
) -> None:
    """Print a profile's stored settings."""
    from sprest.config import load_profile
    from sprest.exceptions import ConfigError

    try:
        profile = load_profile(name)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    format_response(profile.model_dump(mode="json"))


@profile_app.command("delete")
def profile_delete(
    name: str = typer.Argument(help="Profile name."),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Delete a profile.

    Asks for confirmation unless ``--force`` is given.
    """
    from sprest.config import delete_profile
    from sprest.exceptions import ConfigError

    if not force:
        confirmed = typer.confirm(f'Delete profile "{name}"?')
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    try:
        delete_profile(name)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success(f'Profile "{name}" deleted.')

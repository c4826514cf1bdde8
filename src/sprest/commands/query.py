"""Commands that talk to the site: ``sprest query`` and ``sprest settings``.

Both resolve the active profile with :func:`~sprest.config.resolve_config`
(``--profile``/``--site-url`` flags first), open a
:class:`~sprest.client.SyncClient` and print the result through the global
:class:`~sprest.output.OutputManager`.

Example::

    sprest query "_api/web/lists" --select Title,ItemCount --top 5
    sprest --json settings --list AppConfig --ttl 60
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import typer

from sprest.cache import ConfigurationCache
from sprest.configuration import ConfigurationProvider
from sprest.exceptions import InvalidUsageError, MalformedResponseError, SprestError
from sprest.models import GlobalConfig, Profile
from sprest.output import error, format_response, info, print_settings

if TYPE_CHECKING:
    from sprest.client import SyncClient


def _client(ctx: typer.Context, profile: Profile) -> SyncClient:
    from sprest.auth import create_default_manager
    from sprest.client import SyncClient

    dry_run = bool((ctx.obj or {}).get("dry_run", False))
    return SyncClient(profile, auth_manager=create_default_manager(), dry_run=dry_run)


def query_command(
    ctx: typer.Context,
    path: str = typer.Argument(help="REST path relative to the site, e.g. _api/web/lists."),
    select: Optional[str] = typer.Option(
        None, "--select", "-s", help="Comma-separated $select fields."
    ),
    filter_: Optional[str] = typer.Option(
        None, "--filter", "-f", help="OData $filter expression."
    ),
    expand: Optional[str] = typer.Option(
        None, "--expand", "-e", help="Comma-separated $expand fields."
    ),
    top: Optional[int] = typer.Option(None, "--top", "-t", help="Maximum number of results."),
    order_by: Optional[list[str]] = typer.Option(
        None,
        "--order-by",
        "-o",
        help="Sort key; append ':desc' for descending. Repeat for several keys.",
    ),
) -> None:
    """Send a GET to a REST path and print the unwrapped result.

    Example::

        sprest query _api/web --select Title,Url
        sprest query "_api/web/lists/getByTitle('Tasks')/items" --filter "Status eq 'Open'" -o Created:desc
    """
    from sprest.rest import QueryableCollection

    try:
        _, profile = _resolve(ctx)
        with _client(ctx, profile) as client:
            resource = QueryableCollection(profile.site_url, path, client=client)
            if select:
                resource.select(*_split(select))
            if filter_:
                resource.filter(filter_)
            if expand:
                resource.expand(*_split(expand))
            if top is not None:
                resource.top(top)
            for key in order_by or []:
                field, _, direction = key.partition(":")
                resource.order_by(field, ascending=direction.lower() != "desc")
            format_response(resource.get())
    except SprestError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def settings_command(
    ctx: typer.Context,
    list_title: Optional[str] = typer.Option(
        None, "--list", "-l", help="Configuration list title (default: the profile's)."
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Bypass the configuration cache."),
    ttl: Optional[int] = typer.Option(
        None, "--ttl", help="Cache lifetime in seconds (default: cache.ttl_seconds)."
    ),
) -> None:
    """Print the Title/Value mapping stored in the configuration list.

    Results are cached per site and list for ``cache.ttl_seconds``; with
    ``cache.persistent`` enabled the cache lives on disk between runs.

    Example::

        sprest settings
        sprest --json settings --list AppConfig --no-cache
    """
    from sprest.configuration import SPListConfigurationProvider
    from sprest.rest import SPRest

    try:
        config, profile = _resolve(ctx)
        dry_run = bool((ctx.obj or {}).get("dry_run", False))
        with _client(ctx, profile) as client:
            web = SPRest(client, base_url=profile.site_url).web
            title = list_title or profile.config_list
            source = SPListConfigurationProvider(web, title)
            if no_cache or dry_run or not config.cache.enabled:
                values = _load(source, dry_run)
            else:
                cache = _cache(config)
                try:
                    values = _load(source.as_caching(ttl_seconds=ttl, cache=cache), dry_run)
                finally:
                    cache.close()
        if values is None:
            return
        print_settings(values, title)
    except SprestError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _resolve(ctx: typer.Context) -> tuple[GlobalConfig, Profile]:
    """Resolve the global config and the profile the command should use.

    Raises:
        InvalidUsageError: If neither a profile nor a site URL is available.
    """
    from sprest.config import resolve_config

    obj = ctx.obj or {}
    config, profile = resolve_config(obj.get("profile"), obj.get("site_url"))
    if profile is None:
        raise InvalidUsageError(
            "No profile configured. Create one with 'sprest profile add' "
            "or pass --site-url."
        )
    return config, profile


def _load(provider: ConfigurationProvider, dry_run: bool) -> Optional[dict[str, str]]:
    try:
        return provider.get_configuration()
    except MalformedResponseError:
        if dry_run:
            info("[dry-run] No configuration loaded.")
            return None
        raise


def _cache(config: GlobalConfig) -> ConfigurationCache:
    """The cache for this run: on disk when ``cache.persistent`` is set."""
    from sprest.cache import DiskConfigurationCache
    from sprest.config import get_cache_dir

    if config.cache.persistent:
        return DiskConfigurationCache(get_cache_dir(), config.cache)
    return ConfigurationCache(ttl_seconds=config.cache.ttl_seconds)


def _split(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]

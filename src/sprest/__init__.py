"""sprest -- a fluent client for SharePoint REST resources and list-backed configuration.

Resources are composed as immutable URL builders and sent through a shared
transport only when a verb is called::

    from sprest.client import SyncClient
    from sprest.rest import SPRest

    with SyncClient(profile, auth_manager=create_default_manager()) as client:
        sp = SPRest(client)
        rows = sp.web.lists.get_by_title("Tasks").items.select("Title").top(5).get()

Configuration stored in a ``Title``/``Value`` list is read through a
provider, optionally cached::

    provider = SPListConfigurationProvider(sp.web, "config").as_caching(ttl_seconds=60)
    settings = provider.get_configuration()

Modules:
    app: Typer application and CLI entry point.
    rest: Queryable resources (webs, lists, items, fields, views, site).
    configuration: Configuration providers, the caching decorator, and Settings.
    cache: Expiring configuration cache (in memory or on disk).
    client: httpx transport with auth, request digest, and retry.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and profile management.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"

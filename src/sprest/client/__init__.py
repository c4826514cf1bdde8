"""HTTP transport for sprest.

:class:`SyncClient` wraps :mod:`httpx` with OData headers, auth injection,
request digest handling, dry-run mode, and retry with exponential backoff.
Any object with the same ``request(method, url, headers=None, body=None)``
method can stand in for it; :class:`Transport` names that interface.

Example::

    from sprest.client import SyncClient

    with SyncClient(profile, auth_manager=manager) as client:
        response = client.request("GET", "_api/web")
"""

from __future__ import annotations

from typing import Optional, Protocol, Union

import httpx

from sprest.client.sync_client import SyncClient


class Transport(Protocol):
    """The one method a Queryable needs from its transport collaborator."""

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
        body: Union[str, bytes, None] = None,
    ) -> httpx.Response: ...


__all__ = ["SyncClient", "Transport"]

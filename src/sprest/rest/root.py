"""Entry point binding a transport to the root resources of one site."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sprest.rest.site import Site
from sprest.rest.webs import Web

if TYPE_CHECKING:
    from sprest.client import Transport


class SPRest:
    """Factory for the root :class:`Web` and :class:`Site` of a site.

    Args:
        client: Transport shared by every resource derived from this root.
        base_url: Site URL. Leave empty to send URLs relative to the
            transport's own site (``SyncClient`` resolves them against
            ``profile.site_url``).

    Example::

        with SyncClient(profile) as client:
            sp = SPRest(client)
            titles = [l["Title"] for l in sp.web.lists.select("Title").get()]
    """

    def __init__(self, client: Optional[Transport] = None, base_url: str = "") -> None:
        self._client = client
        self._base_url = base_url

    @property
    def web(self) -> Web:
        return Web(self._base_url, client=self._client)

    @property
    def site(self) -> Site:
        return Site(self._base_url, client=self._client)

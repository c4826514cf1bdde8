"""The site collection (``_api/site``) and its static helper endpoints."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Optional, Union

from sprest.rest.paths import PathBuilder
from sprest.rest.queryable import Queryable, QueryableInstance
from sprest.rest.webs import Web

if TYPE_CHECKING:
    from sprest.client import Transport

_API_COMPONENT = re.compile(r"(?:^|/)_api(?=/|$)", re.IGNORECASE)


class Site(QueryableInstance):
    """A site collection. Built from a site URL, it addresses ``<site>/_api/site``."""

    def __init__(
        self,
        base: Union[str, Queryable, PathBuilder],
        path: Optional[str] = "_api/site",
        client: Optional[Transport] = None,
    ) -> None:
        super().__init__(base, path, client)

    @property
    def root_web(self) -> Web:
        """The root web of the site collection."""
        return Web(self, "rootweb")

    def get_context_info(self) -> Any:
        """Return the context information (form digest, versions) for the site."""
        return Queryable(self._site_url(), "_api/contextinfo", client=self.client).post()

    def get_document_libraries(self, absolute_web_url: str) -> Any:
        """Return the document libraries of the web at *absolute_web_url* (SharePoint Online)."""
        q = Queryable(self._site_url(), "_api/sp.web.getdocumentlibraries(@v)", client=self.client)
        q.query["@v"] = f"'{absolute_web_url}'"
        return q.get()

    def get_web_url_from_page_url(self, absolute_page_url: str) -> str:
        """Return the URL of the web that contains the page at *absolute_page_url*."""
        q = Queryable(self._site_url(), "_api/sp.web.getweburlfrompageurl(@v)", client=self.client)
        q.query["@v"] = f"'{absolute_page_url}'"
        data = q.get()
        if isinstance(data, dict):
            return data.get("GetWebUrlFromPageUrl", data.get("value"))
        return data

    def _site_url(self) -> str:
        """The site URL: everything before the ``_api`` path component."""
        url = self.path.relative_url()
        match = _API_COMPONENT.search(url)
        return url[: match.start()] if match else url

"""Webs (sites within a site collection) and their sub-webs."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from sprest.exceptions import MalformedResponseError
from sprest.rest.fields import Fields
from sprest.rest.lists import List, Lists
from sprest.rest.odata import delete_headers, merge_headers, metadata_body, parameters_body
from sprest.rest.paths import PathBuilder
from sprest.rest.queryable import (
    AddResult,
    Queryable,
    QueryableCollection,
    QueryableInstance,
    UpdateResult,
)

if TYPE_CHECKING:
    from sprest.client import Transport

_API_WEB_SUFFIX = re.compile(r"/_api/web/?$", re.IGNORECASE)


class Web(QueryableInstance):
    """A web. Built from a site URL, it addresses ``<site>/_api/web``."""

    def __init__(
        self,
        base: Union[str, Queryable, PathBuilder],
        path: Optional[str] = "_api/web",
        client: Optional[Transport] = None,
    ) -> None:
        super().__init__(base, path, client)

    @property
    def webs(self) -> Webs:
        return Webs(self)

    @property
    def lists(self) -> Lists:
        return Lists(self)

    @property
    def fields(self) -> Fields:
        return Fields(self)

    @property
    def site_users(self) -> QueryableCollection:
        """Users known to the site collection (``siteusers``)."""
        return QueryableCollection(self, "siteusers")

    def get_list(self, list_relative_url: str) -> List:
        """Address a list by its server-relative URL, e.g. ``/sites/dev/Lists/Tasks``."""
        return List(self, f"getList('{list_relative_url}')")

    def update(self, properties: Mapping[str, Any]) -> UpdateResult[Web]:
        """Update this web with *properties* (MERGE)."""
        data = self.post(metadata_body("SP.Web", properties), headers=merge_headers())
        return UpdateResult(data, self)

    def delete(self) -> None:
        """Delete this web."""
        self.post(headers=delete_headers())


class Webs(QueryableCollection):
    """The sub-webs of a web."""

    instance_class = Web

    def __init__(
        self,
        base: Union[str, Queryable],
        path: Optional[str] = "webs",
        client: Optional[Transport] = None,
    ) -> None:
        super().__init__(base, path, client)

    def get_by_id(self, id: Any) -> Web:
        """Address a sub-web by GUID: ``webs('<id>')``."""
        return Web(self, f"('{id}')")

    def add(
        self,
        title: str,
        url: str,
        description: str = "",
        template: str = "STS",
        language: int = 1033,
        inherit_permissions: bool = True,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> AddResult[Web]:
        """Create a sub-web.

        Args:
            title: The new web's title.
            url: The new web's URL segment, relative to this web.
            description: The new web's description.
            template: Web template name (``STS`` = team site).
            language: Locale id of the new web.
            inherit_permissions: Whether to inherit permissions from the parent.
            properties: Further ``SP.WebCreationInformation`` properties.

        Raises:
            MalformedResponseError: If the response does not say where the
                new web lives.
        """
        body = parameters_body(
            "SP.WebCreationInformation",
            {
                "Description": description,
                "Language": language,
                "Title": title,
                "Url": url,
                "UseSamePermissionsAsParentSite": inherit_permissions,
                "WebTemplate": template,
                **(properties or {}),
            },
        )
        data = Webs(self, "add").post(body)
        return AddResult(data, Web(_web_root_url(data), client=self.client))


def _web_root_url(data: Any) -> str:
    """The absolute URL of a web from its creation payload."""
    if isinstance(data, dict):
        if data.get("Url"):
            return data["Url"]
        uri = (data.get("__metadata") or {}).get("uri") or data.get("odata.id")
        if uri:
            return _API_WEB_SUFFIX.sub("", uri)
    raise MalformedResponseError("Add web: response carries neither 'Url' nor an OData id")

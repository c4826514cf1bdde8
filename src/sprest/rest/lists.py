"""Lists and document libraries of a web."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from sprest.exceptions import NotFoundError
from sprest.rest.fields import Fields
from sprest.rest.items import Items
from sprest.rest.odata import delete_headers, merge_headers, metadata_body, require_field
from sprest.rest.queryable import (
    AddResult,
    Queryable,
    QueryableCollection,
    QueryableInstance,
    UpdateResult,
)
from sprest.rest.views import View, Views

if TYPE_CHECKING:
    from sprest.client import Transport


class List(QueryableInstance):
    """A single list or document library."""

    @property
    def items(self) -> Items:
        """The list's items."""
        return Items(self)

    @property
    def fields(self) -> Fields:
        return Fields(self)

    @property
    def views(self) -> Views:
        return Views(self)

    @property
    def default_view(self) -> View:
        """The view shown when the list is opened without a view name."""
        return View(self, "DefaultView")

    def get_list_item_entity_type_full_name(self) -> str:
        """Return the OData type of this list's items, e.g. ``SP.Data.TasksListItem``."""
        data = List(self).select("ListItemEntityTypeFullName").get()
        return require_field(data, "ListItemEntityTypeFullName", f"List {self.to_url()}")

    def update(
        self,
        properties: Mapping[str, Any],
        etag: str = "*",
    ) -> UpdateResult[List]:
        """Update this list with *properties* (MERGE).

        When ``Title`` changes, the returned resource addresses the list by
        its new title.
        """
        data = self.post(metadata_body("SP.List", properties), headers=merge_headers(etag))
        resource = self
        if "Title" in properties:
            resource = self._ancestor(Lists).get_by_title(properties["Title"])
        return UpdateResult(data, resource)

    def delete(self, etag: str = "*") -> None:
        """Delete this list."""
        self.post(headers=delete_headers(etag))


@dataclass
class EnsureResult:
    """Outcome of :meth:`Lists.ensure`: whether the list had to be created."""

    data: Any
    resource: List
    created: bool


class Lists(QueryableCollection):
    """The list collection of a web."""

    instance_class = List

    def __init__(
        self,
        base: Union[str, Queryable],
        path: Optional[str] = "lists",
        client: Optional[Transport] = None,
    ) -> None:
        super().__init__(base, path, client)

    def get_by_title(self, title: str) -> List:
        """Address a list by title: ``lists/getByTitle('<title>')``.

        Args:
            title: The list title; quotes must already be escaped.

        Returns:
            The :class:`List`.
        """
        return List(self, f"getByTitle('{title}')")

    def get_by_id(self, id: Any) -> List:
        """Address a list by GUID: ``lists/getById('<id>')``."""
        return List(self, f"getById('{id}')")

    def add(
        self,
        title: str,
        description: str = "",
        template: int = 100,
        enable_content_types: bool = False,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> AddResult[List]:
        """Add a list to the web.

        Args:
            title: The new list's title.
            description: The new list's description.
            template: Base template id (100 = custom list, 101 = document library).
            enable_content_types: Whether content types are enabled.
            properties: Further ``SP.List`` properties.
        """
        body = metadata_body(
            "SP.List",
            {
                "AllowContentTypes": enable_content_types,
                "BaseTemplate": template,
                "ContentTypesEnabled": enable_content_types,
                "Description": description,
                "Title": title,
                **(properties or {}),
            },
        )
        data = self.post(body)
        return AddResult(data, self.get_by_title(title))

    def ensure(
        self,
        title: str,
        description: str = "",
        template: int = 100,
        enable_content_types: bool = False,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> EnsureResult:
        """Return the list titled *title*, adding it first when it does not exist."""
        existing = self.get_by_title(title)
        try:
            return EnsureResult(existing.get(), existing, created=False)
        except NotFoundError:
            added = self.add(title, description, template, enable_content_types, properties)
            return EnsureResult(added.data, added.resource, created=True)

"""List views and the fields they display."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from sprest.rest.odata import delete_headers, merge_headers, metadata_body, require_field
from sprest.rest.queryable import (
    AddResult,
    Queryable,
    QueryableCollection,
    QueryableInstance,
    UpdateResult,
)

if TYPE_CHECKING:
    from sprest.client import Transport


class ViewFields(QueryableCollection):
    """The ordered field references shown by a view."""

    def __init__(
        self,
        base: Union[str, Queryable],
        path: Optional[str] = "viewfields",
        client: Optional[Transport] = None,
    ) -> None:
        super().__init__(base, path, client)

    def get_schema_xml(self) -> Any:
        """Return the CAML ``<ViewFields>`` fragment."""
        return ViewFields(self, "schemaxml").get()

    def add(self, field_name: str) -> None:
        """Append the field with internal name *field_name* to the view."""
        ViewFields(self, f"addviewfield('{field_name}')").post()

    def move(self, field_name: str, index: int) -> None:
        """Move *field_name* to position *index* in the view."""
        ViewFields(self, "moveviewfieldto").post(
            {"field": field_name, "index": index}
        )

    def remove(self, field_name: str) -> None:
        """Remove *field_name* from the view."""
        ViewFields(self, f"removeviewfield('{field_name}')").post()

    def remove_all(self) -> None:
        """Remove every field from the view."""
        ViewFields(self, "removeallviewfields").post()


class View(QueryableInstance):
    """A single view of a list."""

    @property
    def fields(self) -> ViewFields:
        return ViewFields(self)

    def update(self, properties: Mapping[str, Any]) -> UpdateResult[View]:
        """Update this view with *properties* (MERGE)."""
        data = self.post(metadata_body("SP.View", properties), headers=merge_headers())
        return UpdateResult(data, self)

    def delete(self) -> None:
        """Delete this view."""
        self.post(headers=delete_headers())

    def render_as_html(self) -> Any:
        """Return the view rendered as HTML by the server."""
        data = View(self, "renderashtml").get()
        if isinstance(data, dict):
            return data.get("RenderAsHtml", data.get("value"))
        return data


class Views(QueryableCollection):
    """The view collection of a list."""

    instance_class = View

    def __init__(
        self,
        base: Union[str, Queryable],
        path: Optional[str] = "views",
        client: Optional[Transport] = None,
    ) -> None:
        super().__init__(base, path, client)

    def get_by_id(self, id: Any) -> View:
        """Address a view by GUID: ``views('<id>')``."""
        return View(self, f"('{id}')")

    def get_by_title(self, title: str) -> View:
        """Address a view by title: ``views/getByTitle('<title>')``."""
        return View(self, f"getByTitle('{title}')")

    def add(
        self,
        title: str,
        personal_view: bool = False,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> AddResult[View]:
        """Add a view to the list.

        Args:
            title: The new view's title.
            personal_view: Whether the view is visible to its creator only.
            properties: Further ``SP.View`` properties, e.g. ``{"RowLimit": 30}``.
        """
        body = metadata_body(
            "SP.View",
            {"PersonalView": personal_view, "Title": title, **(properties or {})},
        )
        data = self.post(body)
        return AddResult(data, self.get_by_id(require_field(data, "Id", "Add view")))

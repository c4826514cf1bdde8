"""Site and list columns (``fields``)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from sprest.rest.odata import (
    delete_headers,
    merge_headers,
    metadata_body,
    parameters_body,
    require_field,
)
from sprest.rest.queryable import (
    AddResult,
    Queryable,
    QueryableCollection,
    QueryableInstance,
    UpdateResult,
)

if TYPE_CHECKING:
    from sprest.client import Transport

Properties = Mapping[str, Any]


class Field(QueryableInstance):
    """A single field (column) of a web or list."""

    def update(
        self,
        properties: Properties,
        field_type: str = "SP.Field",
    ) -> UpdateResult[Field]:
        """Update this field with *properties* (MERGE).

        Args:
            properties: Field properties to change, e.g. ``{"Description": "..."}``.
            field_type: OData type of the field; child types such as
                ``SP.FieldText`` are needed to change type-specific properties.
        """
        data = self.post(metadata_body(field_type, properties), headers=merge_headers())
        return UpdateResult(data, self)

    def delete(self) -> None:
        """Delete this field."""
        self.post(headers=delete_headers())


class Fields(QueryableCollection):
    """The field collection of a web or list."""

    instance_class = Field

    def __init__(
        self,
        base: Union[str, Queryable],
        path: Optional[str] = "fields",
        client: Optional[Transport] = None,
    ) -> None:
        super().__init__(base, path, client)

    def get_by_id(self, id: Any) -> Field:
        """Address a field by its GUID.

        Args:
            id: The field's ``Id``, without braces.

        Returns:
            The field, addressed as ``fields('<id>')``.
        """
        return Field(self, f"('{id}')")

    def get_by_title(self, title: str) -> Field:
        """Address a field by its display title.

        Args:
            title: The title as shown in the UI; quotes must already be
                escaped (see :func:`~sprest.rest.odata.escape_literal`).

        Returns:
            The field, addressed as ``fields/getByTitle('<title>')``.
        """
        return Field(self, f"getByTitle('{title}')")

    def get_by_internal_name_or_title(self, name: str) -> Field:
        """Address a field by internal name, falling back to title on the server side.

        Args:
            name: The ``InternalName`` (e.g. ``Created_x0020_By``) or title.

        Returns:
            The field, addressed as ``fields/getByInternalNameOrTitle('<name>')``.
        """
        return Field(self, f"getByInternalNameOrTitle('{name}')")

    def add(
        self,
        title: str,
        field_type: str,
        properties: Optional[Properties] = None,
    ) -> AddResult[Field]:
        """Add a field to the collection.

        Args:
            title: The new field's title.
            field_type: OData type of the field, e.g. ``SP.FieldText``.
            properties: Type-specific properties, e.g. ``{"FieldTypeKind": 2}``.

        Returns:
            The server payload and the new :class:`Field`, addressed by id.
        """
        body = metadata_body(field_type, {"Title": title, **(properties or {})})
        data = self.post(body)
        return AddResult(data, self.get_by_id(require_field(data, "Id", "Add field")))

    def create_field_as_xml(self, xml: Union[str, Properties]) -> AddResult[Field]:
        """Create a field from a CAML ``<Field .../>`` schema.

        Args:
            xml: The schema string, or a full
                ``SP.XmlSchemaFieldCreationInformation`` property mapping
                (``SchemaXml``, ``Options``).

        Returns:
            The server payload and the new :class:`Field`, addressed by id.

        Raises:
            MalformedResponseError: If the response carries no ``Id``.
        """
        info = {"SchemaXml": xml} if isinstance(xml, str) else dict(xml)
        body = parameters_body("SP.XmlSchemaFieldCreationInformation", info)
        data = Fields(self, "createfieldasxml").post(body)
        return AddResult(data, self.get_by_id(require_field(data, "Id", "Create field")))

"""List items.

Writing an item needs the list's item entity type (``SP.Data.<List>ListItem``);
when the caller does not supply it, it is read from the parent list first.
"""

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
    from sprest.rest.lists import List


def _list_class() -> type[List]:
    from sprest.rest.lists import List

    return List


class Item(QueryableInstance):
    """A single list item, addressed as ``items(<id>)``."""

    def update(
        self,
        properties: Mapping[str, Any],
        etag: str = "*",
        entity_type_name: Optional[str] = None,
    ) -> UpdateResult[Item]:
        """Update this item with *properties* (MERGE).

        Args:
            properties: Column values keyed by internal name.
            etag: ``IF-Match`` precondition; ``"*"`` overwrites unconditionally.
            entity_type_name: The list's item type; looked up when omitted.
        """
        if entity_type_name is None:
            entity_type_name = self._ancestor(_list_class(), levels=2).get_list_item_entity_type_full_name()
        data = self.post(
            metadata_body(entity_type_name, properties),
            headers=merge_headers(etag),
        )
        return UpdateResult(data, self)

    def delete(self, etag: str = "*") -> None:
        """Delete this item."""
        self.post(headers=delete_headers(etag))

    def recycle(self) -> Any:
        """Move this item to the recycle bin; returns the recycle bin item id."""
        return Item(self, "recycle").post()


class Items(QueryableCollection):
    """The item collection of a list."""

    instance_class = Item

    def __init__(
        self,
        base: Union[str, Queryable],
        path: Optional[str] = "items",
        client: Optional[Transport] = None,
    ) -> None:
        super().__init__(base, path, client)

    def get_by_id(self, id: Any) -> Item:
        """Address an item by its integer id.

        Args:
            id: The item ``Id``.

        Returns:
            The item, addressed positionally as ``items(<id>)``.
        """
        return Item(self, f"({id})")

    def add(
        self,
        properties: Optional[Mapping[str, Any]] = None,
        entity_type_name: Optional[str] = None,
    ) -> AddResult[Item]:
        """Add an item to the list.

        Args:
            properties: Column values keyed by internal name.
            entity_type_name: The list's item type; looked up when omitted.
        """
        if entity_type_name is None:
            entity_type_name = self._ancestor(_list_class()).get_list_item_entity_type_full_name()
        data = self.post(metadata_body(entity_type_name, properties))
        return AddResult(data, self.get_by_id(require_field(data, "Id", "Add item")))

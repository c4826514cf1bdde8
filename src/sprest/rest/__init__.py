"""Fluent builders for SharePoint REST resources.

:class:`~sprest.rest.queryable.Queryable` and its two refinements do the
URL composition and request plumbing; the resource modules only name paths
and shape write bodies.

Typical usage::

    from sprest.rest import SPRest

    sp = SPRest(client)
    tasks = sp.web.lists.get_by_title("Tasks")
    open_items = tasks.items.filter("Status eq 'Open'").select("Id", "Title").get()
"""

from sprest.rest.fields import Field, Fields
from sprest.rest.items import Item, Items
from sprest.rest.lists import EnsureResult, List, Lists
from sprest.rest.paths import PathBuilder
from sprest.rest.queryable import (
    AddResult,
    Queryable,
    QueryableCollection,
    QueryableInstance,
    QueryParams,
    UpdateResult,
)
from sprest.rest.root import SPRest
from sprest.rest.site import Site
from sprest.rest.views import View, ViewFields, Views
from sprest.rest.webs import Web, Webs

__all__ = [
    "AddResult",
    "EnsureResult",
    "Field",
    "Fields",
    "Item",
    "Items",
    "List",
    "Lists",
    "PathBuilder",
    "Queryable",
    "QueryableCollection",
    "QueryableInstance",
    "QueryParams",
    "SPRest",
    "Site",
    "UpdateResult",
    "View",
    "ViewFields",
    "Views",
    "Web",
    "Webs",
]

"""Composable, copy-on-derive REST resources.

Every resource in :mod:`sprest.rest` is a :class:`Queryable`: a
:class:`~sprest.rest.paths.PathBuilder` value plus a reference to a shared
transport (see :class:`~sprest.client.Transport`). Two refinements carry
the OData query builders:

* :class:`QueryableCollection` -- ``select``, ``filter``, ``expand``,
  ``top``, ``skip``, ``order_by``, and key selectors
  (``get_by_id``/``get_by_title``) returning instance children.
* :class:`QueryableInstance` -- one addressable entity; ``select`` and
  ``expand`` only.

Deriving a child (``Fields(web)``, ``lists.get_by_title("Tasks")``) copies
the parent's path and query parameters into a new builder. Nothing is sent
over the network until :meth:`Queryable.get` or :meth:`Queryable.post` is
called.

Example::

    items = Web("https://contoso.sharepoint.com/_api/web", client=client) \\
        .lists.get_by_title("Tasks").items
    rows = items.select("Title", "Status").filter("Status eq 'Open'").top(10).get()
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, MutableMapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Generic, Mapping, Optional, TypeVar, Union

import httpx
from pydantic import TypeAdapter, ValidationError

from sprest.client.response import map_response_error, parse_json_body, unwrap_odata
from sprest.exceptions import ConfigError, ConnectionError_, MalformedResponseError
from sprest.rest.paths import PathBuilder

if TYPE_CHECKING:
    from sprest.client import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R", bound="Queryable")

Parser = Callable[[Any], Any]
RequestBody = Union[Mapping[str, Any], list, str, bytes, None]


class QueryParams(MutableMapping[str, str]):
    """Live view of a :class:`Queryable`'s query parameters.

    Writes replace the owner's :class:`PathBuilder` with an updated copy, so
    they never leak into the resource the owner was derived from.
    """

    def __init__(self, owner: Queryable) -> None:
        self._owner = owner

    def __getitem__(self, name: str) -> str:
        value = self._owner._path.get_query_param(name)
        if value is None:
            raise KeyError(name)
        return value

    def __setitem__(self, name: str, value: str) -> None:
        self._owner._path = self._owner._path.with_query_param(name, value)

    def __delitem__(self, name: str) -> None:
        if name not in self:
            raise KeyError(name)
        self._owner._path = self._owner._path.without_query_param(name)

    def __iter__(self) -> Iterator[str]:
        return iter([name for name, _ in self._owner._path.query])

    def __len__(self) -> int:
        return len(self._owner._path.query)

    def add(self, name: str, value: str) -> None:
        self[name] = value

    def __repr__(self) -> str:
        return f"QueryParams({dict(self)!r})"


class Queryable:
    """A REST resource address plus the verbs to call it.

    Args:
        base: A base URL (absolute, or relative to the transport's site), a
            parent :class:`Queryable` whose path and query are copied, or a
            ready-made :class:`PathBuilder`.
        path: Relative path to descend into from *base*.
        client: Transport used by the verbs. A child inherits its parent's
            transport unless one is given.
    """

    def __init__(
        self,
        base: Union[str, Queryable, PathBuilder],
        path: Optional[str] = None,
        client: Optional[Transport] = None,
    ) -> None:
        if isinstance(base, Queryable):
            self._path = base._path
            self._client = client if client is not None else base._client
        elif isinstance(base, PathBuilder):
            self._path = base
            self._client = client
        else:
            self._path = PathBuilder.from_url(base)
            self._client = client
        if path:
            self._path = self._path.with_segment(path)

    # ------------------------------------------------------------------ #
    # Addressing
    # ------------------------------------------------------------------ #

    @property
    def path(self) -> PathBuilder:
        """The current immutable :class:`PathBuilder`."""
        return self._path

    @property
    def query(self) -> QueryParams:
        """Mutable view of the query parameters sent with the next request."""
        return QueryParams(self)

    @property
    def client(self) -> Optional[Transport]:
        """The transport the verbs use, or ``None`` for an unbound resource."""
        return self._client

    def to_url(self) -> str:
        """Resolve the full request URL, query string included."""
        return self._path.resolve()

    def __str__(self) -> str:
        return self.to_url()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_url()!r})"

    def _ancestor(self, cls: type[R], levels: int = 1) -> R:
        """Address the resource *levels* path components up, as a *cls*."""
        path = self._path
        for _ in range(levels):
            path = path.parent()
        return cls(path, "", client=self._client)

    # ------------------------------------------------------------------ #
    # Verbs
    # ------------------------------------------------------------------ #

    def get(self, parser: Parser = unwrap_odata) -> Any:
        """Issue a GET and return the parsed JSON payload.

        Args:
            parser: Applied to the decoded JSON; the default strips the OData
                envelope (``d``/``results``/``value``).

        Returns:
            The parsed payload, or ``None`` for an empty body.

        Raises:
            RequestError: On a non-2xx status, a non-JSON body, or a
                transport failure.
            ConfigError: If no transport was provided.
        """
        return self._parse(self._send("GET"), parser)

    def get_as(self, model: type[T] | Any) -> T:
        """Issue a GET and validate the payload against *model*.

        *model* is anything :class:`pydantic.TypeAdapter` accepts, such as a
        :class:`pydantic.BaseModel` subclass or ``list[SomeModel]``.

        Raises:
            MalformedResponseError: If the payload does not match *model*.
        """
        data = self.get()
        try:
            return TypeAdapter(model).validate_python(data)
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Unexpected payload from {self.to_url()}: {exc}"
            ) from exc

    def post(
        self,
        body: RequestBody = None,
        headers: Optional[Mapping[str, str]] = None,
        parser: Parser = unwrap_odata,
    ) -> Any:
        """Issue a POST and return the parsed JSON payload.

        Args:
            body: Request body. Mappings and lists are serialised to JSON;
                strings and bytes are sent unchanged.
            headers: Header overrides, e.g. ``{"X-HTTP-Method": "MERGE"}``.
            parser: Applied to the decoded JSON.

        Raises:
            RequestError: On a non-2xx status, a non-JSON body, or a
                transport failure.
            ConfigError: If no transport was provided.
        """
        if body is not None and not isinstance(body, (str, bytes)):
            body = json.dumps(body)
        return self._parse(self._send("POST", body, dict(headers or {})), parser)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _send(
        self,
        method: str,
        body: Union[str, bytes, None] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        if self._client is None:
            raise ConfigError(
                f"No transport configured for {self.to_url()}; pass client= when "
                "creating the root resource"
            )
        url = self.to_url()
        logger.debug("%s %s", method, url)
        try:
            response = self._client.request(method, url, headers=headers or None, body=body)
        except httpx.HTTPError as exc:
            raise ConnectionError_(f"{method} {url} failed: {exc}") from exc
        map_response_error(response)
        return response

    @staticmethod
    def _parse(response: httpx.Response, parser: Parser) -> Any:
        data = parse_json_body(response)
        if data is None:
            return None
        return parser(data)


class _Selectable(Queryable):
    """``$select`` and ``$expand``, valid on collections and single entities alike."""

    def select(self: R, *fields: str) -> R:
        """Restrict the returned properties (``$select``); the last call wins."""
        self.query["$select"] = ",".join(fields)
        return self

    def expand(self: R, *fields: str) -> R:
        """Inline related entities (``$expand``); the last call wins."""
        self.query["$expand"] = ",".join(fields)
        return self


class QueryableInstance(_Selectable):
    """A single addressable entity (one web, list, field, view, or item)."""


class QueryableCollection(_Selectable):
    """A collection of entities with the OData collection query options.

    Subclasses set :attr:`instance_class` so that key selectors return the
    matching single-entity type.
    """

    instance_class: type[QueryableInstance] = QueryableInstance

    def filter(self: R, expr: str) -> R:
        """Set ``$filter`` to an OData expression, e.g. ``"Title eq 'A'"``."""
        self.query["$filter"] = expr
        return self

    def top(self: R, n: int) -> R:
        """Return at most *n* entities (``$top``)."""
        self.query["$top"] = str(int(n))
        return self

    def skip(self: R, n: int) -> R:
        """Skip the first *n* entities (``$skip``)."""
        self.query["$skip"] = str(int(n))
        return self

    def order_by(self: R, field: str, ascending: bool = True) -> R:
        """Append ``field asc|desc`` to ``$orderby``; repeated calls add sort keys."""
        entry = f"{field} {'asc' if ascending else 'desc'}"
        existing = self.query.get("$orderby")
        self.query["$orderby"] = f"{existing},{entry}" if existing else entry
        return self

    def get_by_id(self, id: Any) -> QueryableInstance:
        """Return the entity with key *id*: ``<collection>/getById('<id>')``."""
        return self.instance_class(self, f"getById('{id}')")

    def get_by_title(self, title: str) -> QueryableInstance:
        """Return the entity titled *title*: ``<collection>/getByTitle('<title>')``.

        *title* is inserted verbatim; escape embedded quotes with
        :func:`~sprest.rest.odata.escape_literal` first.
        """
        return self.instance_class(self, f"getByTitle('{title}')")


@dataclass
class AddResult(Generic[R]):
    """Outcome of an add call: the server's payload and an addressable resource."""

    data: Any
    resource: R


@dataclass
class UpdateResult(Generic[R]):
    """Outcome of an update call: the server's payload (often ``None``) and the resource."""

    data: Any
    resource: R

"""Immutable URL composition for REST resource paths.

A :class:`PathBuilder` is a value object: a base URL, an ordered tuple of
path segments, and an ordered tuple of query parameters. Every ``with_*``
method returns a new builder, so a derived resource can never change the
URL of the resource it was derived from.

Segments are pre-formatted OData fragments (``lists``,
``getByTitle('Tasks')``, ``('7b7c...')``) and are emitted as given; only
query names and values are percent-encoded.

Example::

    path = (
        PathBuilder.from_url("https://contoso.sharepoint.com/sites/dev")
        .with_segment("_api/web/lists")
        .with_segment("getByTitle('Tasks')")
        .with_query_param("$select", "Title,Id")
    )
    path.resolve()
    # "https://contoso.sharepoint.com/sites/dev/_api/web/lists/getByTitle('Tasks')?$select=Title,Id"
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from urllib.parse import parse_qsl, quote

_REPEATED_SLASHES = re.compile(r"/{2,}")
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")

# Kept literal in query names and values: OData system query options
# ($select), aliases (@v), and the list/literal syntax (a,b  'x'  f(x)  a:b).
_QUERY_SAFE = "$@,'():"

# Collections addressed by a trailing key, as in ``items(5)`` or
# ``lists('7b7c...')``. Any other ``name(...)`` component is a method call.
_KEYED_COLLECTIONS = frozenset(
    {
        "attachmentfiles",
        "contenttypes",
        "fields",
        "files",
        "folders",
        "items",
        "lists",
        "roleassignments",
        "sitegroups",
        "siteusers",
        "viewfields",
        "views",
        "webs",
    }
)
_KEYED_COMPONENT = re.compile(r"^(?P<name>[A-Za-z]+)(?P<key>\(.*\))$")


def _collapse_slashes(text: str) -> str:
    """Collapse repeated ``/`` everywhere except inside ``'...'`` literals."""
    return "'".join(
        part if i % 2 else _REPEATED_SLASHES.sub("/", part)
        for i, part in enumerate(text.split("'"))
    )


def _split_query(text: str) -> tuple[str, str]:
    """Partition *text* on the first ``?`` that is not inside a ``'...'`` literal."""
    quoted = False
    for index, char in enumerate(text):
        if char == "'":
            quoted = not quoted
        elif char == "?" and not quoted:
            return text[:index], text[index + 1 :]
    return text, ""


def _clean_segment(segment: str) -> str:
    return _collapse_slashes(segment).strip("/")


@dataclass(frozen=True)
class PathBuilder:
    """Base URL + path segments + query parameters, resolved on demand.

    Attributes:
        base: The root URL (absolute or relative), without trailing ``/``.
        segments: Path components appended after ``base``.
        query: ``(name, value)`` pairs; names are unique and keep the
            position of their first insertion.
    """

    base: str = ""
    segments: tuple[str, ...] = ()
    query: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_url(cls, url: str) -> PathBuilder:
        """Create a builder from a URL, moving any ``?query`` into :attr:`query`.

        Args:
            url: An absolute or relative URL. Repeated ``/`` outside quoted
                literals are collapsed and a trailing ``/`` is dropped.

        Returns:
            A builder with no segments whose :attr:`base` is the URL path.
        """
        base, query_string = _split_query(url)
        scheme = _SCHEME.match(base)
        prefix = scheme.group(0) if scheme else ""
        base = (prefix + _collapse_slashes(base[len(prefix):])).rstrip("/")
        return cls(base=base)._with_query_string(query_string)

    def with_segment(self, segment: str) -> PathBuilder:
        """Return a builder one level deeper.

        Leading, trailing, and repeated ``/`` in *segment* are trimmed. A
        segment starting with ``(`` is an OData key selector and resolves
        without a separator (``views`` + ``('id')`` -> ``views('id')``).
        A ``?query`` carried by *segment* is merged into :attr:`query`.

        Args:
            segment: A pre-formatted OData path fragment.

        Returns:
            The new builder, or ``self`` when *segment* is empty and has no
            query.
        """
        path_part, query_string = _split_query(segment)
        cleaned = _clean_segment(path_part)
        builder = replace(self, segments=self.segments + (cleaned,)) if cleaned else self
        return builder._with_query_string(query_string)

    def parent(self) -> PathBuilder:
        """Return the builder one level up, with an empty query.

        Key selectors count as a level: the parent of ``items(5)`` is
        ``items``. This holds both for a ``(5)`` segment and for a base URL
        ending in ``/items(5)``; a method call such as
        ``getByTitle('Tasks')`` is a single level.
        """
        if self.segments:
            return PathBuilder(base=self.base, segments=self.segments[:-1])
        head, sep, last = self.base.rpartition("/")
        keyed = _KEYED_COMPONENT.match(last)
        if keyed and keyed.group("name").lower() in _KEYED_COLLECTIONS:
            return PathBuilder(base=f"{head}{sep}{keyed.group('name')}")
        if not sep or head.endswith(":/"):
            return PathBuilder(base=self.base)
        return PathBuilder(base=head)

    def _with_query_string(self, query_string: str) -> PathBuilder:
        builder = self
        for name, value in parse_qsl(query_string, keep_blank_values=True):
            builder = builder.with_query_param(name, value)
        return builder

    def with_query_param(self, name: str, value: object) -> PathBuilder:
        """Return a builder with *name* set to *value*, overwriting any previous value."""
        text = str(value)
        if any(key == name for key, _ in self.query):
            query = tuple((key, text if key == name else old) for key, old in self.query)
        else:
            query = self.query + ((name, text),)
        return replace(self, query=query)

    def without_query_param(self, name: str) -> PathBuilder:
        """Return a builder with *name* removed from the query."""
        return replace(self, query=tuple(p for p in self.query if p[0] != name))

    def get_query_param(self, name: str) -> str | None:
        for key, value in self.query:
            if key == name:
                return value
        return None

    def relative_url(self) -> str:
        """The base and segments joined by ``/``, without the query string."""
        url = self.base
        for segment in self.segments:
            if segment.startswith("(") or not url:
                url += segment
            else:
                url += "/" + segment
        return url

    def query_string(self) -> str:
        """The ``&``-joined, percent-encoded query, without the leading ``?``."""
        return "&".join(
            f"{quote(name, safe=_QUERY_SAFE)}={quote(value, safe=_QUERY_SAFE)}"
            for name, value in self.query
        )

    def resolve(self) -> str:
        """Produce the final request URL."""
        url = self.relative_url()
        query = self.query_string()
        return f"{url}?{query}" if query else url

    def __str__(self) -> str:
        return self.resolve()

"""OData write conventions used by the SharePoint REST API.

* Create and update bodies are JSON objects tagged with a type discriminator:
  ``{"__metadata": {"type": "SP.List"}, "Title": "Tasks", ...}``.
* The API only accepts GET and POST, so MERGE and DELETE are sent as POST
  with an ``X-HTTP-Method`` header (verb tunnelling).
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from sprest.exceptions import MalformedResponseError

X_HTTP_METHOD = "X-HTTP-Method"

MERGE_HEADERS: Mapping[str, str] = {X_HTTP_METHOD: "MERGE"}
DELETE_HEADERS: Mapping[str, str] = {X_HTTP_METHOD: "DELETE"}


def metadata_body(type_name: str, properties: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
    """Build a write envelope for *type_name* carrying *properties*.

    ``__metadata`` always comes first; a ``__metadata`` key inside
    *properties* is ignored.
    """
    body: dict[str, Any] = {"__metadata": {"type": type_name}}
    for key, value in (properties or {}).items():
        if key != "__metadata":
            body[key] = value
    return body


def parameters_body(type_name: str, properties: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
    """Wrap a write envelope under ``parameters``, as ``*/add`` and ``createfieldasxml`` expect."""
    return {"parameters": metadata_body(type_name, properties)}


def merge_headers(etag: Optional[str] = None) -> dict[str, str]:
    """Headers for a MERGE update; *etag* adds an ``IF-Match`` precondition."""
    headers = dict(MERGE_HEADERS)
    if etag is not None:
        headers["IF-Match"] = etag
    return headers


def delete_headers(etag: Optional[str] = None) -> dict[str, str]:
    """Headers for a DELETE; *etag* adds an ``IF-Match`` precondition."""
    headers = dict(DELETE_HEADERS)
    if etag is not None:
        headers["IF-Match"] = etag
    return headers


def escape_literal(value: str) -> str:
    """Double single quotes so *value* can sit inside an OData string literal.

    Key-selector helpers such as ``get_by_title`` do not call this; callers
    building titles from user input do.
    """
    return value.replace("'", "''")


def require_field(data: Any, name: str, context: str) -> Any:
    """Return ``data[name]``, raising if the payload is not an object carrying it.

    Raises:
        MalformedResponseError: If *data* is not a dict or lacks *name*.
    """
    if not isinstance(data, dict) or data.get(name) is None:
        raise MalformedResponseError(f"{context}: response has no '{name}' property")
    return data[name]

"""Response helpers shared by the transport and the Queryable verbs.

* :func:`map_response_error` turns a non-2xx :class:`httpx.Response` into
  the matching :class:`~sprest.exceptions.RequestError` subclass.
* :func:`parse_json_body` decodes a 2xx body, treating an empty body as
  ``None``.
* :func:`unwrap_odata` strips the OData envelopes SharePoint puts around
  payloads (``{"d": {"results": [...]}}`` in verbose mode, ``{"value":
  [...]}`` in the lighter metadata modes).
"""

from __future__ import annotations

from typing import Any

import httpx

from sprest.exceptions import (
    AuthError,
    NotFoundError,
    RequestError,
    ServerError,
)


def parse_json_body(response: httpx.Response) -> Any:
    """Decode the JSON body of a successful response.

    Returns:
        The decoded JSON value, or ``None`` when the body is empty (as for
        MERGE and DELETE calls that answer ``204 No Content``).

    Raises:
        RequestError: If the body is present but is not valid JSON.
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise RequestError(
            f"HTTP {response.status_code}: response body is not valid JSON",
            status_code=response.status_code,
            body=response.text,
        ) from exc


def unwrap_odata(data: Any) -> Any:
    """Remove the OData response envelope, if any.

    ``{"d": {"results": [...]}}`` and ``{"d": {...}}`` come from
    ``odata=verbose``; ``{"value": [...]}`` from ``minimalmetadata`` and
    ``nometadata``. Anything else is returned unchanged.
    """
    if not isinstance(data, dict):
        return data
    if "d" in data and isinstance(data["d"], dict):
        inner = data["d"]
        if "results" in inner:
            return inner["results"]
        return inner
    if "value" in data and isinstance(data["value"], list):
        return data["value"]
    return data


def _error_message(response: httpx.Response) -> str:
    """Pull a human-readable message out of a SharePoint error payload."""
    try:
        detail = response.json()
    except ValueError:
        return response.text[:200] if response.text else ""

    if not isinstance(detail, dict):
        return str(detail)

    error = detail.get("error") or detail.get("odata.error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, dict):
            return str(message.get("value", ""))
        if message:
            return str(message)
        return str(error.get("code", ""))
    return str(detail.get("message") or detail.get("detail") or error or "")


def map_response_error(response: httpx.Response) -> None:
    """Raise a typed :class:`~sprest.exceptions.RequestError` for non-2xx responses.

    401/403 map to :class:`AuthError`, 404 to :class:`NotFoundError`, and
    everything else outside 2xx to :class:`ServerError`. The raised error
    carries ``status_code`` and the raw ``body`` text.
    """
    status = response.status_code
    if 200 <= status < 300:
        return

    msg = _error_message(response)
    prefix = f"HTTP {status}"
    full_msg = f"{prefix}: {msg}" if msg else prefix
    body = response.text

    if status in (401, 403):
        raise AuthError(full_msg, status_code=status, body=body)
    if status == 404:
        raise NotFoundError(full_msg, status_code=status, body=body)
    raise ServerError(full_msg, status_code=status, body=body)

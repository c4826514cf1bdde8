"""Synchronous HTTP transport with auth, request digest, dry-run, and retry.

This module provides :class:`SyncClient`, the transport every
:class:`~sprest.rest.queryable.Queryable` sends its requests through. It
wraps :class:`httpx.Client` and layers on:

- **OData headers** -- ``Accept`` (and ``Content-Type`` for bodies) set to
  ``application/json;odata=<level>``.
- **Auth injection** -- credentials from
  :class:`~sprest.auth.base.AuthResult` are merged into every request.
- **Request digest** -- POST requests carry an ``X-RequestDigest`` header
  obtained from ``_api/contextinfo`` and cached per site until it expires.
- **Dry-run mode** -- prints the request to stderr and returns a synthetic
  200 response without sending traffic.
- **Retry with backoff** -- retries on 5xx and network errors with
  exponential delay (1 s, 2 s, 4 s, ...).
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional, Union

import httpx

from sprest.auth.base import AuthResult
from sprest.auth.manager import AuthManager
from sprest.client.response import map_response_error, parse_json_body, unwrap_odata
from sprest.exceptions import ConnectionError_, MalformedResponseError, ServerError
from sprest.models import Profile
from sprest.output import get_output

logger = logging.getLogger(__name__)

Body = Union[str, bytes, None]


class SyncClient:
    """Synchronous transport for SharePoint REST calls.

    Must be used as a context manager so that the underlying
    :class:`httpx.Client` is opened and closed.

    Args:
        profile: The connection profile containing ``site_url``, auth
            config, and request settings (timeout, retries, SSL verify).
        auth_manager: Optional manager that resolves credentials when the
            client is entered. When ``None``, no auth is injected.
        dry_run: When ``True``, requests are printed to stderr and a
            synthetic 200 response is returned without network I/O.
        transport: Optional :class:`httpx.BaseTransport` handed to the
            underlying client (``httpx.MockTransport`` in tests).

    Example::

        with SyncClient(profile, auth_manager=am) as client:
            web = SPRest(client).web
            data = web.lists.select("Title").get()
    """

    def __init__(
        self,
        profile: Profile,
        auth_manager: Optional[AuthManager] = None,
        dry_run: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._profile = profile
        self._auth_manager = auth_manager
        self._dry_run = dry_run
        self._transport = transport
        self._auth_result: Optional[AuthResult] = None
        self._client: Optional[httpx.Client] = None
        self._digests: dict[str, tuple[str, float]] = {}

    @property
    def site_url(self) -> str:
        return self._profile.site_url

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SyncClient:
        config = self._profile.request
        self._client = httpx.Client(
            base_url=self._profile.site_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        if self._auth_manager and self._profile.auth:
            self._auth_result = self._auth_manager.authenticate(self._profile)
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None
        self._digests.clear()

    # ------------------------------------------------------------------ #
    # Transport interface
    # ------------------------------------------------------------------ #

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
        body: Body = None,
    ) -> httpx.Response:
        """Send one request and return the successful response.

        Args:
            method: HTTP method (GET or POST; other verbs are tunnelled via
                ``X-HTTP-Method`` by the caller).
            url: Absolute URL, or a URL relative to the profile's ``site_url``.
            headers: Extra request headers; they override the defaults.
            body: Pre-serialised request body.

        Returns:
            The :class:`httpx.Response` (2xx only).

        Raises:
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ServerError: On 5xx after all retries, or any other non-2xx.
            ConnectionError_: On network / timeout errors after all retries.
        """
        method = method.upper()
        merged_headers = self._default_headers(body is not None)
        merged_headers.update(headers or {})
        merged_headers, params = self._inject_auth(merged_headers)

        if self._dry_run:
            return self._print_dry_run(method, url, merged_headers, params, body)

        if method == "POST" and self._profile.request.use_digest:
            if not any(k.lower() == "x-requestdigest" for k in merged_headers):
                merged_headers["X-RequestDigest"] = self._get_digest(url)

        response = self._execute_with_retry(method, url, merged_headers, params, body)
        map_response_error(response)
        return response

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _default_headers(self, has_body: bool) -> dict[str, str]:
        accept = f"application/json;odata={self._profile.request.odata}"
        headers = {"Accept": accept}
        if has_body:
            headers["Content-Type"] = accept
        return headers

    def _inject_auth(self, headers: dict[str, str]) -> tuple[dict[str, str], dict[str, str]]:
        """Merge auth credentials under *headers*; caller-supplied values win."""
        if self._auth_result is None:
            return headers, {}
        return {**self._auth_result.headers, **headers}, dict(self._auth_result.params)

    def _web_url_for(self, url: str) -> str:
        """Return the web URL a request URL belongs to (everything before ``/_api``)."""
        index = url.lower().find("/_api")
        if index >= 0:
            return url[:index]
        if url.lower().startswith("_api"):
            return self._profile.site_url
        if url.startswith(("http://", "https://")):
            return url.rstrip("/")
        return self._profile.site_url

    def _get_digest(self, url: str) -> str:
        """Return a valid form digest for the web that *url* belongs to."""
        web_url = self._web_url_for(url)
        cached = self._digests.get(web_url)
        now = time.monotonic()
        if cached is not None and cached[1] > now:
            return cached[0]

        logger.debug("Requesting form digest for %s", web_url or "(site)")
        headers, params = self._inject_auth(self._default_headers(False))
        contextinfo = f"{web_url}/_api/contextinfo" if web_url else "_api/contextinfo"
        response = self._execute_with_retry("POST", contextinfo, headers, params, None)
        map_response_error(response)

        info = unwrap_odata(parse_json_body(response))
        if isinstance(info, dict):
            info = info.get("GetContextWebInformation", info)
        if not isinstance(info, dict) or not info.get("FormDigestValue"):
            raise MalformedResponseError(
                f"contextinfo response for {web_url or 'site'} has no FormDigestValue"
            )
        timeout = int(info.get("FormDigestTimeoutSeconds", 1800))
        # Expire one minute ahead of the server-side timeout.
        self._digests[web_url] = (info["FormDigestValue"], now + max(timeout - 60, 0))
        return info["FormDigestValue"]

    def _execute_with_retry(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        params: dict[str, str],
        body: Body,
    ) -> httpx.Response:
        """Execute the HTTP request with exponential-backoff retry.

        Retries on 5xx status codes and connection / timeout errors up to
        ``max_retries`` times. The delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        max_retries = self._profile.request.max_retries
        last_error: Exception | None = None

        for attempt in range(max_retries + 1):
            try:
                kwargs: dict[str, Any] = {
                    "method": method,
                    "url": url,
                    "headers": headers,
                }
                if params:
                    kwargs["params"] = params
                if body is not None:
                    kwargs["content"] = body

                response = self._client.request(**kwargs)

                if response.status_code >= 500 and attempt < max_retries:
                    delay = 2 ** attempt
                    logger.debug(
                        "Server error %s, retrying in %ss (attempt %s/%s)",
                        response.status_code, delay, attempt + 1, max_retries,
                    )
                    time.sleep(delay)
                    continue

                return response

            except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
                last_error = exc
                if attempt < max_retries:
                    delay = 2 ** attempt
                    logger.debug(
                        "Connection error: %s, retrying in %ss (attempt %s/%s)",
                        exc, delay, attempt + 1, max_retries,
                    )
                    time.sleep(delay)
                    continue

                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

        if last_error is not None:  # pragma: no cover
            raise ConnectionError_(str(last_error)) from last_error
        raise ServerError("Request failed after all retries")  # pragma: no cover

    def _print_dry_run(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        params: dict[str, str],
        body: Body,
    ) -> httpx.Response:
        """Print request details to stderr and return a synthetic 200 response."""
        output = get_output()
        output.info(f"[dry-run] {method} {url}")
        for key, value in headers.items():
            output.info(f"  Header: {key}: {value}")
        for key, value in params.items():
            output.info(f"  Param: {key}={value}")
        if body is not None:
            text = body.decode("utf-8", "replace") if isinstance(body, bytes) else body
            output.info(f"  Body: {text}")

        return httpx.Response(
            status_code=200,
            headers={"content-type": "application/json"},
            content=json.dumps({"dry_run": True, "message": "Request was not sent"}),
            request=httpx.Request(method=method, url=self._absolute(url)),
        )

    def _absolute(self, url: str) -> str:
        if url.startswith(("http://", "https://")) or not self._profile.site_url:
            return url
        return f"{self._profile.site_url}/{url.lstrip('/')}"

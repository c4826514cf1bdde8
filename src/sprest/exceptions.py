"""Exception hierarchy for sprest.

All exceptions inherit from :class:`SprestError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`sprest.exit_codes`.
The CLI entry point in :func:`sprest.app.main` catches ``SprestError`` and
exits with the appropriate code; library callers simply catch the class
they care about.

Subclass hierarchy::

    SprestError (exit 1)
    +-- InvalidUsageError        (exit 2)
    +-- ConfigError              (exit 1)
    +-- RequestError             (exit 5)  status_code, body
    |   +-- AuthError            (exit 3)
    |   +-- NotFoundError        (exit 4)
    |   +-- ServerError          (exit 5)
    |   +-- ConnectionError_     (exit 6)
    +-- ConfigurationLoadError   (exit 8)
    +-- MalformedResponseError   (exit 9)
"""

from __future__ import annotations

from typing import Optional

from sprest.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONFIGURATION_LOAD_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MALFORMED_RESPONSE,
    EXIT_NOT_FOUND,
    EXIT_REQUEST_FAILURE,
)


class SprestError(Exception):
    """Base exception for all sprest errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`sprest.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SprestError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(SprestError):
    """Raised for configuration problems (missing profiles, invalid JSON, no transport)."""

    exit_code = EXIT_GENERIC_FAILURE


class RequestError(SprestError):
    """Raised when a REST call fails: non-2xx status, unreadable body, or transport failure.

    Args:
        message: Human-readable error description.
        status_code: HTTP status of the failed response, or ``None`` when
            no response was received.
        body: Raw response text (empty when no response was received).
    """

    exit_code = EXIT_REQUEST_FAILURE

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: str = "",
        exit_code: int | None = None,
    ):
        super().__init__(message, exit_code)
        self.status_code = status_code
        self.body = body


class AuthError(RequestError):
    """Raised when authentication or authorisation fails (HTTP 401/403, unusable credentials)."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(RequestError):
    """Raised when the API returns HTTP 404 (resource not found)."""

    exit_code = EXIT_NOT_FOUND


class ServerError(RequestError):
    """Raised when the API returns HTTP 5xx or a 4xx without a dedicated class."""

    exit_code = EXIT_REQUEST_FAILURE


class ConnectionError_(RequestError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ConfigurationLoadError(SprestError):
    """Raised when a configuration provider cannot load its values.

    The underlying :class:`RequestError` is chained as ``__cause__``.
    """

    exit_code = EXIT_CONFIGURATION_LOAD_ERROR


class MalformedResponseError(SprestError):
    """Raised when a JSON payload lacks expected fields (e.g. a config row without a Title)."""

    exit_code = EXIT_MALFORMED_RESPONSE

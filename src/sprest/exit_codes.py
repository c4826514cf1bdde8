"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~sprest.exceptions.SprestError` subclass.
Shell wrappers can inspect the exit code of the ``sprest`` CLI to
determine the failure class without parsing stderr.

Example::

    $ sprest query web/lists
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- credentials were rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""Authentication or authorisation failed (HTTP 401/403)."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_REQUEST_FAILURE = 5
"""The remote API returned an error status (HTTP 5xx or an unmapped 4xx)."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_CONFIGURATION_LOAD_ERROR = 8
"""Configuration values could not be loaded from their remote source."""

EXIT_MALFORMED_RESPONSE = 9
"""The remote API answered with a payload missing expected fields."""

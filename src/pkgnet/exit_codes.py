"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~pkgnet.exceptions.PkgnetError` subclass.
Shell wrappers can tell a proxy misconfiguration apart from a refused
credential without parsing stderr.

Example::

    $ http_proxy=localhost pkgnet fetch http://example.org
    $ echo $?
    7   # EXIT_PROXY_CONFIG_ERROR -- the proxy URL is malformed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, or an interactive answer that failed validation."""

EXIT_AUTH_FAILURE = 3
"""Authentication or authorisation failed."""

EXIT_TRANSPORT_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_PROXY_CONFIG_ERROR = 7
"""A proxy environment variable holds a malformed URL."""

"""Exception hierarchy for pkgnet.

All exceptions inherit from :class:`PkgnetError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`pkgnet.exit_codes`.
The top-level error handler in :func:`pkgnet.app.main` catches
``PkgnetError`` and exits with the appropriate code.

Subclass hierarchy::

    PkgnetError (exit 1)
    +-- InvalidUsageError             (exit 2)
    |   +-- ValidationError           (exit 2)
    +-- AuthError                     (exit 3)
    +-- TransportError                (exit 6)
    |   +-- ProxyConfigurationError   (exit 7)
    +-- ConfigError                   (exit 1)

Messages never carry secrets; URLs are masked before they are formatted
into an error.
"""

from pkgnet.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PROXY_CONFIG_ERROR,
    EXIT_TRANSPORT_ERROR,
)


class PkgnetError(Exception):
    """Base exception for all pkgnet errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(PkgnetError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ValidationError(InvalidUsageError):
    """Raised when an interactive answer is not one of the accepted values.

    Only the operation that asked the question is aborted; the caller
    decides whether to ask again.
    """


class AuthError(PkgnetError):
    """Raised when credentials are rejected by the remote server."""

    exit_code = EXIT_AUTH_FAILURE


class TransportError(PkgnetError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_TRANSPORT_ERROR


class ProxyConfigurationError(TransportError):
    """Raised when the proxy that applies to a request is not a valid URL.

    A malformed proxy must stop the request: proceeding unproxied would
    bypass an interception the operator asked for.
    """

    exit_code = EXIT_PROXY_CONFIG_ERROR


class ConfigError(PkgnetError):
    """Raised for configuration problems (invalid JSON, unknown keys, unwritable files)."""

    exit_code = EXIT_GENERIC_FAILURE

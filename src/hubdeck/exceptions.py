"""Exception hierarchy for hubdeck.

All exceptions inherit from :class:`HubdeckError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`hubdeck.exit_codes`.

The profile store does not raise these for expected failures: ``init``,
``switch_profile`` and ``get_users`` return them inside result objects so the
caller decides how to present them. The top-level handler in
:func:`hubdeck.app.main` catches ``HubdeckError`` raised by commands and exits
with the matching code.

Subclass hierarchy::

    HubdeckError (exit 1)
    +-- InvalidUsageError (exit 2)
    +-- ScopeError        (exit 3)
    +-- NotFoundError     (exit 4)
    +-- NetworkError      (exit 6)
    +-- ValidationError   (exit 8)
    +-- ConfigError       (exit 1)
"""

from hubdeck.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NETWORK_ERROR,
    EXIT_NOT_FOUND,
    EXIT_SCOPE_FAILURE,
    EXIT_VALIDATION_ERROR,
)


class HubdeckError(Exception):
    """Base exception for all hubdeck errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(HubdeckError):
    """Raised for invalid CLI arguments or an out-of-range profile index."""

    exit_code = EXIT_INVALID_USAGE


class ScopeError(HubdeckError):
    """The token was accepted but does not carry every required scope."""

    exit_code = EXIT_SCOPE_FAILURE


class NotFoundError(HubdeckError):
    """No persisted profiles exist (missing file or empty list)."""

    exit_code = EXIT_NOT_FOUND


class NetworkError(HubdeckError):
    """Identity verification failed at the network level.

    Covers timeouts, DNS failures, refused connections, non-2xx responses
    and response bodies that are not a JSON object.
    """

    exit_code = EXIT_NETWORK_ERROR


class ValidationError(HubdeckError):
    """Raised by the CLI when the store rejects a candidate profile."""

    exit_code = EXIT_VALIDATION_ERROR


class ConfigError(HubdeckError):
    """Raised for configuration problems (invalid JSON, bad credential sources, unsafe paths)."""

    exit_code = EXIT_GENERIC_FAILURE

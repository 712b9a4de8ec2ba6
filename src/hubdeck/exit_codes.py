"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~hubdeck.exceptions.HubdeckError` subclass.
Shell wrappers can inspect the exit code to tell a rejected token apart from
an unreachable host without parsing stderr.

Example::

    $ hubdeck status
    $ echo $?
    3   # EXIT_SCOPE_FAILURE -- the token lacks a required scope
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments (e.g. an out-of-range profile index)."""

EXIT_SCOPE_FAILURE = 3
"""The credential was accepted but lacks a required authorization scope."""

EXIT_NOT_FOUND = 4
"""No persisted profiles were found."""

EXIT_NETWORK_ERROR = 6
"""The remote API could not be reached or returned an unusable response."""

EXIT_VALIDATION_ERROR = 8
"""A candidate profile failed the structural validation rules."""

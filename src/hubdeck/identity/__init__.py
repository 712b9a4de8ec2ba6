"""Credential verification against the remote API.

Classes:
    :class:`UserClient` -- one-shot ``GET /user`` client backed by
    :class:`httpx.AsyncClient`.
    :class:`IdentityVerifier` -- interprets the client's result as
    ok / network error / insufficient scope.
"""

from hubdeck.identity.client import UserClient
from hubdeck.identity.verifier import (
    REQUIRED_SCOPES,
    IdentityVerifier,
    VerifyOutcome,
    VerifyStatus,
)

__all__ = [
    "REQUIRED_SCOPES",
    "IdentityVerifier",
    "UserClient",
    "VerifyOutcome",
    "VerifyStatus",
]

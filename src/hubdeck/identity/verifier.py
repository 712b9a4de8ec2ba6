"""Verify a connection's credential and interpret the result.

:class:`IdentityVerifier` makes exactly one call through a
:class:`~hubdeck.identity.client.UserClient` and reduces it to a
:class:`VerifyOutcome`:

* ``OK`` -- the token was accepted and carries every scope in
  :data:`REQUIRED_SCOPES`; the outcome holds the :class:`~hubdeck.models.Identity`.
* ``NETWORK_ERROR`` -- the call failed; the outcome holds the
  :class:`~hubdeck.exceptions.NetworkError`.
* ``INSUFFICIENT_SCOPE`` -- the call succeeded but at least one required
  scope is missing; the outcome holds a :class:`~hubdeck.exceptions.ScopeError`.

Scopes beyond the required set are ignored.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Callable, Optional

from hubdeck.exceptions import HubdeckError, NetworkError, ScopeError
from hubdeck.identity.client import UserClient
from hubdeck.models import ConnectionSettings, Identity, RequestConfig
from hubdeck.output import debug

REQUIRED_SCOPES: tuple[str, ...] = ("repo", "user", "notifications", "read:org")

ClientFactory = Callable[[ConnectionSettings], UserClient]


def has_required_scopes(scopes: Iterable[str]) -> bool:
    """Return whether *scopes* include every scope in :data:`REQUIRED_SCOPES`."""
    return set(REQUIRED_SCOPES).issubset(scopes)


def missing_scopes(scopes: Iterable[str]) -> list[str]:
    granted = set(scopes)
    return [scope for scope in REQUIRED_SCOPES if scope not in granted]


class VerifyStatus(str, enum.Enum):
    OK = "ok"
    NETWORK_ERROR = "network_error"
    INSUFFICIENT_SCOPE = "insufficient_scope"


@dataclass
class VerifyOutcome:
    """Normalised result of :meth:`IdentityVerifier.verify`.

    Attributes:
        status: Which of the three outcomes occurred.
        identity: The verified identity, set only for ``OK``.
        error: The failure, set for ``NETWORK_ERROR`` and
            ``INSUFFICIENT_SCOPE``.
    """

    status: VerifyStatus
    identity: Optional[Identity] = None
    error: Optional[HubdeckError] = None

    @property
    def ok(self) -> bool:
        return self.status == VerifyStatus.OK


class IdentityVerifier:
    """Check that a connection's token is usable.

    Args:
        request: Timeout and TLS settings passed to each client.
        client_factory: Builds the client for a connection. Defaults to a
            :class:`UserClient` configured from *request*.
    """

    def __init__(
        self,
        request: Optional[RequestConfig] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self._request = request or RequestConfig()
        self._client_factory = client_factory or self._default_client

    def _default_client(self, connection: ConnectionSettings) -> UserClient:
        return UserClient(
            connection,
            timeout=self._request.timeout,
            verify_ssl=self._request.verify_ssl,
        )

    async def verify(self, connection: ConnectionSettings) -> VerifyOutcome:
        """Verify *connection* with a single ``GET /user`` round trip."""
        client = self._client_factory(connection)
        try:
            user, header = await client.get_user()
        except NetworkError as exc:
            debug(f"Identity verification failed for {connection.host}: {exc}")
            return VerifyOutcome(status=VerifyStatus.NETWORK_ERROR, error=exc)

        if not has_required_scopes(header.scopes):
            missing = ", ".join(missing_scopes(header.scopes))
            debug(f"Token for {connection.host} is missing scopes: {missing}")
            return VerifyOutcome(
                status=VerifyStatus.INSUFFICIENT_SCOPE,
                error=ScopeError(f"Token is missing required scopes: {missing}"),
            )

        debug(f"Verified {user.login} on {connection.host}")
        return VerifyOutcome(
            status=VerifyStatus.OK,
            identity=Identity(user=user, header=header),
        )

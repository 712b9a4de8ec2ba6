"""Asynchronous client for the authenticated-user endpoint.

:class:`UserClient` performs a single ``GET /user`` against the host named by
a :class:`~hubdeck.models.ConnectionSettings` and returns the user together
with the descriptor derived from the response headers:

* ``X-OAuth-Scopes`` -- comma separated list of scopes granted to the token.
* ``X-GitHub-Enterprise-Version`` -- server version, only read for hosts
  other than ``api.github.com``.

A failed call is reported once, without retrying, and
the caller decides what to do with it.
"""

from __future__ import annotations

from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from hubdeck import __version__
from hubdeck.exceptions import NetworkError
from hubdeck.models import DEFAULT_HOST, ConnectionSettings, IdentityHeader, RemoteUser
from hubdeck.output import debug

SCOPES_HEADER = "X-OAuth-Scopes"
SERVER_VERSION_HEADER = "X-GitHub-Enterprise-Version"


def build_api_url(connection: ConnectionSettings, path: str) -> str:
    """Join the connection's scheme, host and path prefix with *path*.

    Example::

        >>> build_api_url(ConnectionSettings(host="ghe.local", path_prefix="/api/v3/"), "/user")
        'https://ghe.local/api/v3/user'
    """
    scheme = "https" if connection.https else "http"
    base = f"{scheme}://{connection.host}"
    prefix = (connection.path_prefix or "").strip("/")
    if prefix:
        base = f"{base}/{prefix}"
    return f"{base}/{path.lstrip('/')}"


def parse_scopes(value: Optional[str]) -> list[str]:
    """Split an ``X-OAuth-Scopes`` header value into scope names."""
    if not value:
        return []
    return [scope.strip() for scope in value.split(",") if scope.strip()]


class UserClient:
    """Fetch the identity behind a connection's token.

    Args:
        connection: Host, prefix, transport flag and token to use.
        timeout: Request timeout in seconds.
        verify_ssl: Verify TLS certificates.
        transport: Optional ``httpx`` transport, e.g. an
            :class:`httpx.MockTransport` in tests.

    Example::

        client = UserClient(profile.connection)
        user, header = await client.get_user()
    """

    def __init__(
        self,
        connection: ConnectionSettings,
        timeout: float = 10.0,
        verify_ssl: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._connection = connection
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"token {self._connection.token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": f"hubdeck/{__version__}",
        }

    async def get_user(self) -> tuple[RemoteUser, IdentityHeader]:
        """Call ``GET /user`` once.

        Returns:
            The authenticated user and the header-derived descriptor.

        Raises:
            NetworkError: On connection or timeout errors, a non-2xx status,
                or a body that is not a JSON user object.
        """
        url = build_api_url(self._connection, "/user")
        debug(f"GET {url}")

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                verify=self._verify_ssl,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url, headers=self._headers())
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise NetworkError(f"Cannot reach {url}: {exc}") from exc

        if not response.is_success:
            raise NetworkError(f"HTTP {response.status_code} from {url}")

        try:
            body = response.json()
        except ValueError as exc:
            raise NetworkError(f"Malformed response from {url}: {exc}") from exc
        if not isinstance(body, dict):
            raise NetworkError(f"Malformed response from {url}: expected a JSON object")

        try:
            user = RemoteUser.model_validate(body)
        except PydanticValidationError as exc:
            raise NetworkError(f"Malformed user object from {url}: {exc}") from exc

        server_version: Optional[str] = None
        if self._connection.host != DEFAULT_HOST:
            server_version = response.headers.get(SERVER_VERSION_HEADER)

        header = IdentityHeader(
            scopes=parse_scopes(response.headers.get(SCOPES_HEADER)),
            server_version=server_version,
        )
        return user, header

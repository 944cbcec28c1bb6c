"""
Shared I2PControl session token with singleflight refresh.
"""

import asyncio
from typing import Optional

from shared.logging import get_logger

from .deadline import Deadline
from .errors import AuthenticationFailedError
from .rpc import AUTHENTICATE_METHOD, JsonRpcTransport
from .types import AuthResult

API_VERSION = 1


class CredentialStore:
    """Holds the current session token for every concurrent scrape.

    Two locks with separate jobs:

    * ``_token_lock`` guards the token value and is only held for a read or
      a write, never across I/O.
    * ``_refresh_lock`` serializes the act of authenticating and is held for
      exactly one ``Authenticate`` round trip. Waiters re-check the token
      once they get it, so concurrent callers share a single network call.
    """

    def __init__(self, transport: JsonRpcTransport, password: str, api_version: int = API_VERSION):
        self.transport = transport
        self._password = password
        self.api_version = api_version
        self.logger = get_logger("exporter.i2pcontrol.session")

        self._token: Optional[str] = None
        self._token_lock = asyncio.Lock()
        self._refresh_lock = asyncio.Lock()

    @property
    def has_password(self) -> bool:
        return bool(self._password)

    async def current(self) -> Optional[str]:
        """Return the cached token, if any."""
        async with self._token_lock:
            return self._token

    async def set(self, token: str) -> None:
        async with self._token_lock:
            self._token = token

    async def clear(self, stale: Optional[str] = None) -> None:
        """Forget the cached token.

        With ``stale`` given, only clear when the cached token is still that
        value, so a token another caller just refreshed is kept.
        """
        async with self._token_lock:
            if stale is None or self._token == stale:
                self._token = None

    async def authenticate(self, deadline: Deadline) -> str:
        """Return a valid token, calling ``Authenticate`` at most once at a time.

        Raises:
            DeadlineExceededError: No budget left for the network call.
            AuthenticationFailedError: The response carried no token.
            RpcCallError: The ``Authenticate`` call itself failed.
        """
        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            existing = await self.current()
            if existing is not None:
                return existing

            remaining = deadline.require("authentication")
            params = {"API": self.api_version, "Password": self._password}
            result = await self.transport.call(AUTHENTICATE_METHOD, params, remaining, AuthResult)

            if not result.token:
                raise AuthenticationFailedError()

            await self.set(result.token)
            self.logger.info("Obtained authentication token from I2PControl")
            return result.token

"""
I2PControl client: deadline-bounded RouterInfo fetch with one re-auth retry.
"""

from enum import Enum
from typing import Any, Callable, Dict
import time

from shared.logging import get_logger

from .deadline import Deadline
from .errors import RpcApplicationError
from .rpc import ROUTER_INFO_METHOD, JsonRpcTransport
from .session import CredentialStore
from .types import RouterInfoSnapshot


class Attempt(Enum):
    """Where a fetch is in its retry budget."""

    FIRST = "first"
    RETRIED = "retried"


class I2pControlClient:
    """Fetches router status, sharing one session across concurrent scrapes."""

    def __init__(
        self,
        transport: JsonRpcTransport,
        credentials: CredentialStore,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.transport = transport
        self.credentials = credentials
        self.clock = clock
        self.logger = get_logger("exporter.i2pcontrol.client")

    async def fetch_router_info(self, overall_timeout: float) -> RouterInfoSnapshot:
        """Fetch a RouterInfo snapshot within ``overall_timeout`` seconds.

        A token error on the first attempt clears the session, re-authenticates
        and retries once. Anything else, including a second token error, is
        raised unchanged.

        Raises:
            DeadlineExceededError: The budget ran out before a network call.
            AuthenticationFailedError: Authenticate returned no token.
            RpcCallError: The last RPC failed.
        """
        deadline = Deadline.after(overall_timeout, clock=self.clock)
        attempt = Attempt.FIRST

        while True:
            token = await self.credentials.current()
            if token is None:
                self.logger.info("No token found, authenticating...")
                token = await self.credentials.authenticate(deadline)

            params = self.build_params(token)
            remaining = deadline.require("RouterInfo")

            try:
                return await self.transport.call(ROUTER_INFO_METHOD, params, remaining, RouterInfoSnapshot)
            except RpcApplicationError as e:
                if not e.is_token_error or attempt is Attempt.RETRIED:
                    raise
                self.logger.warning("Token error, re-authenticating...", error=str(e), rpc_code=e.rpc_code)
                await self.credentials.clear(stale=token)
                deadline.require("re-authentication")
                await self.credentials.authenticate(deadline)
                attempt = Attempt.RETRIED

    @staticmethod
    def build_params(token: str) -> Dict[str, Any]:
        """RouterInfo parameters: every status key plus the session token."""
        # Empty strings rather than nulls; some i2pd builds reject nulls.
        params: Dict[str, Any] = {key: "" for key in RouterInfoSnapshot.request_keys()}
        params["Token"] = token
        return params

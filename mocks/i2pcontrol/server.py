"""
Mock I2PControl server speaking the JSON-RPC subset the exporter uses.
"""

import asyncio
import itertools
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shared.logging import get_logger

TOKEN_EXPIRED = -32003
INVALID_PASSWORD = -32001
METHOD_NOT_FOUND = -32601


class MockI2pControlServer:
    """Mock I2PControl server implementation."""

    def __init__(self, password: str = "itoopie"):
        self.logger = get_logger("mock.i2pcontrol")
        self.app = FastAPI(title="Mock I2PControl", version="1.0.0")

        self.password = password
        self.valid_tokens: set = set()
        self._token_ids = itertools.count(1)

        # Behaviour switches for tests
        self.reject_all_tokens = False
        self.omit_token = False
        self.auth_delay_seconds = 0.0
        self.router_info_delay_seconds = 0.0

        # Observations
        self.auth_calls = 0
        self.router_info_calls = 0
        self.requests: List[Dict[str, Any]] = []

        self.router_info: Dict[str, Any] = {
            "i2p.router.status": "1",
            "i2p.router.version": "2.54.0",
            "i2p.router.uptime": 3723000,
            "i2p.router.net.bw.inbound.1s": 1024.5,
            "i2p.router.net.bw.inbound.15s": 900.0,
            "i2p.router.net.bw.outbound.1s": 2048.0,
            "i2p.router.net.bw.outbound.15s": 1800.25,
            "i2p.router.net.status": 0,
            "i2p.router.net.tunnels.participating": 42,
            "i2p.router.net.tunnels.successrate": 87,
            "i2p.router.netdb.activepeers": 120,
            "i2p.router.netdb.knownpeers": 3400,
            "i2p.router.net.total.received.bytes": 123456789.0,
            "i2p.router.net.total.sent.bytes": 98765432.0,
        }

        self._setup_routes()

    def expire_tokens(self):
        """Invalidate every issued token, as a router restart would."""
        self.valid_tokens.clear()

    def _setup_routes(self):
        """Set up mock I2PControl routes."""

        @self.app.post("/jsonrpc")
        async def jsonrpc(request: Request):
            """JSON-RPC endpoint."""
            envelope = await request.json()
            self.requests.append({
                "method": envelope.get("method"),
                "params": envelope.get("params"),
                "headers": dict(request.headers),
            })

            method = envelope.get("method")
            params = envelope.get("params") or {}
            if method == "Authenticate":
                return await self._handle_authenticate(params)
            if method == "RouterInfo":
                return await self._handle_router_info(params)
            return self._error(METHOD_NOT_FOUND, "Method not found")

    async def _handle_authenticate(self, params: Dict[str, Any]) -> JSONResponse:
        self.auth_calls += 1
        if self.auth_delay_seconds:
            await asyncio.sleep(self.auth_delay_seconds)

        if params.get("Password") != self.password:
            return self._error(INVALID_PASSWORD, "Invalid password")
        if self.omit_token:
            return self._result({"API": 1})

        token = f"token-{next(self._token_ids)}"
        self.valid_tokens.add(token)
        self.logger.debug("Issued mock token", auth_calls=self.auth_calls)
        return self._result({"API": 1, "Token": token})

    async def _handle_router_info(self, params: Dict[str, Any]) -> JSONResponse:
        self.router_info_calls += 1
        if self.router_info_delay_seconds:
            await asyncio.sleep(self.router_info_delay_seconds)

        token: Optional[str] = params.get("Token")
        if self.reject_all_tokens or token not in self.valid_tokens:
            return self._error(TOKEN_EXPIRED, "Token expired")

        requested = {key for key in params if key != "Token"}
        return self._result({key: value for key, value in self.router_info.items() if key in requested})

    @staticmethod
    def _result(result: Dict[str, Any]) -> JSONResponse:
        return JSONResponse({"id": 1, "jsonrpc": "2.0", "result": result})

    @staticmethod
    def _error(code: int, message: str) -> JSONResponse:
        return JSONResponse({"id": 1, "jsonrpc": "2.0", "error": {"code": code, "message": message}})


def create_app():
    """Create mock I2PControl application."""
    server = MockI2pControlServer()
    return server.app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="127.0.0.1", port=7650)

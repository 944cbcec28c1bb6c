"""
Structured failures raised while talking to the I2PControl JSON-RPC API.
"""

import asyncio
from typing import Any, Dict, Optional, Union

import httpx

from shared.errors import ExporterError

# Application error codes the API reserves for a missing, invalid or expired token.
TOKEN_ERROR_CODES = range(-32004, -32001)


class RpcCallError(ExporterError):
    """Base class for failures of a single JSON-RPC call."""

    def __init__(self, code: str, message: str, method: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, {"method": method, **(details or {})})
        self.method = method


class RpcTransportError(RpcCallError):
    """Connection, TLS or timeout failure below the HTTP layer.

    ``error`` is the httpx exception, or ``asyncio.TimeoutError`` when the
    call ran past its overall budget.
    """

    def __init__(self, method: str, error: Union[httpx.HTTPError, asyncio.TimeoutError]):
        reason = str(error) or "call exceeded its time budget"
        super().__init__("RPC_TRANSPORT_ERROR", f"transport error calling {method}: {reason}", method)
        self.error = error

    @property
    def is_timeout(self) -> bool:
        return isinstance(self.error, (httpx.TimeoutException, asyncio.TimeoutError))


class RpcEncodeError(RpcCallError):
    """The request envelope could not be serialized."""

    def __init__(self, method: str, error: str):
        super().__init__("RPC_ENCODE_ERROR", f"error encoding request body for {method}: {error}", method)
        self.error = error


class RpcHttpError(RpcCallError):
    """The endpoint answered with a non-2xx HTTP status."""

    def __init__(self, method: str, status_code: int, body_snippet: str):
        super().__init__(
            "RPC_HTTP_ERROR",
            f"HTTP {status_code} calling {method}: body: {body_snippet}",
            method,
            {"status_code": status_code},
        )
        self.status_code = status_code
        self.body_snippet = body_snippet


class RpcApplicationError(RpcCallError):
    """The endpoint returned a JSON-RPC ``error`` object."""

    def __init__(self, method: str, rpc_code: int, rpc_message: str):
        super().__init__(
            "RPC_APPLICATION_ERROR",
            f"{method} error {rpc_code}: {rpc_message}",
            method,
            {"rpc_code": rpc_code},
        )
        self.rpc_code = rpc_code
        self.rpc_message = rpc_message

    @property
    def is_token_error(self) -> bool:
        return self.rpc_code in TOKEN_ERROR_CODES


class RpcDecodeError(RpcCallError):
    """The response body is not a valid one-of result/error envelope."""

    def __init__(self, method: str, error: str, body_snippet: str):
        super().__init__(
            "RPC_DECODE_ERROR",
            f"error decoding response body for {method}: {error}; body: {body_snippet}",
            method,
        )
        self.error = error
        self.body_snippet = body_snippet


class AuthenticationFailedError(ExporterError):
    """Authenticate succeeded at the protocol level but returned no token."""

    def __init__(self, message: str = "Authentication failed: no token received"):
        super().__init__("AUTHENTICATION_FAILED", message)


class DeadlineExceededError(ExporterError):
    """No time is left in the scrape budget for the next network call."""

    def __init__(self, step: str):
        super().__init__("DEADLINE_EXCEEDED", f"deadline exceeded before {step}", {"step": step})
        self.step = step

"""
Generic JSON-RPC transport for the I2PControl API.
"""

import asyncio
import json
from typing import Any, Dict, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from shared.logging import get_logger

from .errors import (
    RpcApplicationError,
    RpcDecodeError,
    RpcEncodeError,
    RpcHttpError,
    RpcTransportError,
)

AUTHENTICATE_METHOD = "Authenticate"
ROUTER_INFO_METHOD = "RouterInfo"

SNIPPET_MAX_CHARS = 2048
DEBUG_BODY_MAX_CHARS = 4096
OMITTED_SNIPPET = "<omitted>"
REDACTED = "***redacted***"
SENSITIVE_KEYS = frozenset({"Password", "Token"})

T = TypeVar("T", bound=BaseModel)


class RpcErrorBody(BaseModel):
    """The ``error`` member of a JSON-RPC response."""

    code: int
    message: str


def truncate_chars(text: str, max_chars: int) -> str:
    """Cut ``text`` to at most ``max_chars`` characters."""
    # str slicing counts code points, so a multi-byte character is never split
    return text[:max_chars]


def _describe(error: ValidationError) -> str:
    # Never echo input values; they may hold the token.
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc']) or '<root>'}: {item['msg']}"
        for item in error.errors(include_url=False, include_input=False)
    )


def redact_sensitive_fields(value: Any) -> Any:
    """Return a copy of ``value`` with credential fields masked at any depth."""
    if isinstance(value, dict):
        return {
            key: REDACTED if key in SENSITIVE_KEYS else redact_sensitive_fields(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact_sensitive_fields(item) for item in value]
    return value


class JsonRpcTransport:
    """Sends JSON-RPC envelopes to one endpoint over a shared httpx client."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        *,
        debug_requests: bool = False,
        debug_responses: bool = False,
    ):
        self.client = client
        self.url = url
        self.debug_requests = debug_requests
        self.debug_responses = debug_responses
        self.logger = get_logger("exporter.i2pcontrol.rpc")

    async def call(self, method: str, params: Dict[str, Any], timeout: float, result_model: Type[T]) -> T:
        """Invoke ``method`` and return its ``result`` parsed as ``result_model``.

        Raises one of the ``RpcCallError`` subclasses on failure.
        """
        envelope = {"id": 1, "jsonrpc": "2.0", "method": method, "params": params}
        # Encoded up front so the request has a Content-Length; some servers
        # reject chunked bodies as malformed JSON.
        try:
            body = json.dumps(envelope, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise RpcEncodeError(method, str(e)) from e

        if self.debug_requests:
            self.logger.info(
                "JSON-RPC request body",
                method=method,
                body=json.dumps(redact_sensitive_fields(envelope)),
            )

        # httpx applies ``timeout`` per phase and per read; the outer wait_for
        # bounds the whole exchange, including a slowly streamed body.
        try:
            response = await asyncio.wait_for(
                self.client.post(
                    self.url,
                    content=body,
                    headers={"Content-Type": "application/json", "Content-Length": str(len(body))},
                    timeout=timeout,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise RpcTransportError(method, e) from e
        except httpx.HTTPError as e:
            raise RpcTransportError(method, e) from e

        text = response.text
        if not response.is_success:
            raise RpcHttpError(method, response.status_code, self._body_snippet(method, text))

        if self.debug_responses and method != AUTHENTICATE_METHOD:
            self.logger.debug(
                "JSON-RPC response body",
                method=method,
                body=truncate_chars(text, DEBUG_BODY_MAX_CHARS),
            )

        return self._decode(method, text, result_model)

    def _decode(self, method: str, text: str, result_model: Type[T]) -> T:
        """Parse the exactly-one-of ``result`` / ``error`` envelope."""
        try:
            payload = json.loads(text)
        except ValueError as e:
            raise RpcDecodeError(method, str(e), self._body_snippet(method, text)) from e

        if not isinstance(payload, dict):
            raise RpcDecodeError(method, "response is not a JSON object", self._body_snippet(method, text))

        has_result = "result" in payload
        has_error = "error" in payload
        if has_result == has_error:
            reason = "response has both result and error" if has_result else "response has neither result nor error"
            raise RpcDecodeError(method, reason, self._body_snippet(method, text))

        try:
            if has_error:
                error = RpcErrorBody.model_validate(payload["error"])
            else:
                return result_model.model_validate(payload["result"])
        except ValidationError as e:
            raise RpcDecodeError(method, _describe(e), self._body_snippet(method, text)) from e

        raise RpcApplicationError(method, error.code, error.message)

    @staticmethod
    def _body_snippet(method: str, text: str) -> str:
        # Authenticate responses may echo credential material
        if method == AUTHENTICATE_METHOD:
            return OMITTED_SNIPPET
        return truncate_chars(text, SNIPPET_MAX_CHARS)

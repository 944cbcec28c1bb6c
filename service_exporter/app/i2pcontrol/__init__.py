"""
I2PControl JSON-RPC client: transport, shared session and RouterInfo fetch.
"""

from .client import Attempt, I2pControlClient
from .deadline import Deadline
from .errors import (
    AuthenticationFailedError,
    DeadlineExceededError,
    RpcApplicationError,
    RpcCallError,
    RpcDecodeError,
    RpcEncodeError,
    RpcHttpError,
    RpcTransportError,
)
from .rpc import JsonRpcTransport
from .session import CredentialStore
from .types import AuthResult, RouterInfoSnapshot

__all__ = [
    "Attempt",
    "AuthResult",
    "AuthenticationFailedError",
    "CredentialStore",
    "Deadline",
    "DeadlineExceededError",
    "I2pControlClient",
    "JsonRpcTransport",
    "RouterInfoSnapshot",
    "RpcApplicationError",
    "RpcCallError",
    "RpcDecodeError",
    "RpcEncodeError",
    "RpcHttpError",
    "RpcTransportError",
]

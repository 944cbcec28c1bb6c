"""
Shared configuration management for the i2pd exporter.
"""

import ipaddress
from typing import Tuple
from urllib.parse import urlsplit

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    env: str = Field(default="local", validation_alias=AliasChoices("env", "exporter_env"))
    log_level: str = Field(default="info", validation_alias=AliasChoices("log_level", "exporter_log_level"))


class ExporterConfig(BaseConfig):
    """Settings for the I2PControl exporter service."""

    service_name: str = "exporter"

    # Remote control API
    i2pcontrol_address: str = "https://127.0.0.1:7650"
    i2pcontrol_password: str = "itoopie"
    i2pcontrol_tls_insecure: bool = False

    # Listener
    metrics_listen_addr: str = "0.0.0.0:9600"

    # Time budgets (seconds)
    max_scrape_timeout_seconds: float = 120.0
    startup_auth_timeout_seconds: float = 10.0

    # Debugging
    debug_rpc_requests: bool = Field(
        default=False,
        validation_alias=AliasChoices("debug_rpc_requests", "debug_i2pcontrol_req"),
    )
    debug_rpc_responses: bool = Field(
        default=False,
        validation_alias=AliasChoices("debug_rpc_responses", "debug_i2pcontrol_body"),
    )

    @field_validator("max_scrape_timeout_seconds", "startup_auth_timeout_seconds")
    @classmethod
    def _positive_seconds(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be > 0 seconds")
        return value

    @field_validator("metrics_listen_addr")
    @classmethod
    def _valid_listen_addr(cls, value: str) -> str:
        split_listen_addr(value)
        return value

    @property
    def jsonrpc_url(self) -> str:
        """Full URL of the JSON-RPC endpoint."""
        return f"{self.i2pcontrol_address.rstrip('/')}/jsonrpc"

    @property
    def listen_host(self) -> str:
        return split_listen_addr(self.metrics_listen_addr)[0]

    @property
    def listen_port(self) -> int:
        return split_listen_addr(self.metrics_listen_addr)[1]

    @property
    def target_is_loopback(self) -> bool:
        """Whether the control API lives on the loopback interface."""
        host = urlsplit(self.i2pcontrol_address).hostname
        if not host:
            return False
        if host.lower() == "localhost":
            return True
        try:
            return ipaddress.ip_address(host).is_loopback
        except ValueError:
            return False

    @property
    def accept_invalid_certs(self) -> bool:
        return self.i2pcontrol_tls_insecure or self.target_is_loopback


def split_listen_addr(value: str) -> Tuple[str, int]:
    """Split ``host:port`` (or ``[v6]:port``) into its parts."""
    host, sep, port_text = value.strip().rpartition(":")
    if not sep or not host:
        raise ValueError(f"Invalid METRICS_LISTEN_ADDR '{value}' (expected host:port)")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"Invalid METRICS_LISTEN_ADDR '{value}' (expected host:port)") from None
    if not 0 < port < 65536:
        raise ValueError(f"Invalid METRICS_LISTEN_ADDR '{value}' (port out of range)")
    try:
        ipaddress.ip_address(host)
    except ValueError:
        if host != "localhost":
            raise ValueError(f"Invalid METRICS_LISTEN_ADDR '{value}' (host must be an IP address)") from None
    return host, port


def get_config(**overrides) -> ExporterConfig:
    """Get configuration for the exporter service."""
    return ExporterConfig(**overrides)

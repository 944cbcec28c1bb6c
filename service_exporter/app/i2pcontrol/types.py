"""
I2PControl API result models.
"""

from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AuthResult(BaseModel):
    """Result of the ``Authenticate`` method."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    token: Optional[str] = Field(default=None, alias="Token")


class RouterInfoSnapshot(BaseModel):
    """Sparse router status returned by ``RouterInfo``.

    Every field is optional: ``None`` means the router did not report the
    value in this response, not that the value is zero.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    router_status: Optional[int] = Field(default=None, alias="i2p.router.status")
    router_version: Optional[str] = Field(default=None, alias="i2p.router.version")
    router_uptime: Optional[int] = Field(default=None, alias="i2p.router.uptime")

    bw_inbound_1s: Optional[float] = Field(default=None, alias="i2p.router.net.bw.inbound.1s")
    bw_inbound_15s: Optional[float] = Field(default=None, alias="i2p.router.net.bw.inbound.15s")
    bw_outbound_1s: Optional[float] = Field(default=None, alias="i2p.router.net.bw.outbound.1s")
    bw_outbound_15s: Optional[float] = Field(default=None, alias="i2p.router.net.bw.outbound.15s")
    bw_transit_15s: Optional[float] = Field(default=None, alias="i2p.router.net.bw.transit.15s")

    # 0 OK, 1 Firewalled, 2 Unknown, 3 Proxy, 4 Mesh
    net_status: Optional[int] = Field(default=None, alias="i2p.router.net.status")
    net_status_v6: Optional[int] = Field(default=None, alias="i2p.router.net.status.v6")
    net_error: Optional[int] = Field(default=None, alias="i2p.router.net.error")
    net_error_v6: Optional[int] = Field(default=None, alias="i2p.router.net.error.v6")
    net_testing: Optional[int] = Field(default=None, alias="i2p.router.net.testing")
    net_testing_v6: Optional[int] = Field(default=None, alias="i2p.router.net.testing.v6")

    tunnels_participating: Optional[int] = Field(default=None, alias="i2p.router.net.tunnels.participating")
    tunnels_inbound: Optional[int] = Field(default=None, alias="i2p.router.net.tunnels.inbound")
    tunnels_outbound: Optional[int] = Field(default=None, alias="i2p.router.net.tunnels.outbound")
    tunnels_successrate: Optional[float] = Field(default=None, alias="i2p.router.net.tunnels.successrate")
    tunnels_total_successrate: Optional[float] = Field(
        default=None, alias="i2p.router.net.tunnels.totalsuccessrate"
    )
    tunnels_queue: Optional[int] = Field(default=None, alias="i2p.router.net.tunnels.queue")
    tunnels_tbmqueue: Optional[int] = Field(default=None, alias="i2p.router.net.tunnels.tbmqueue")

    netdb_activepeers: Optional[int] = Field(default=None, alias="i2p.router.netdb.activepeers")
    netdb_knownpeers: Optional[int] = Field(default=None, alias="i2p.router.netdb.knownpeers")
    netdb_floodfills: Optional[int] = Field(default=None, alias="i2p.router.netdb.floodfills")
    netdb_leasesets: Optional[int] = Field(default=None, alias="i2p.router.netdb.leasesets")

    net_total_received_bytes: Optional[float] = Field(default=None, alias="i2p.router.net.total.received.bytes")
    net_total_sent_bytes: Optional[float] = Field(default=None, alias="i2p.router.net.total.sent.bytes")
    net_transit_sent_bytes: Optional[float] = Field(default=None, alias="i2p.router.net.transit.sent.bytes")

    @field_validator("router_status", "router_uptime", "net_testing", "net_testing_v6", mode="before")
    @classmethod
    def _number_from_string(cls, value: Any) -> Any:
        # Some routers send these as strings; "" means not reported.
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
            try:
                return int(value)
            except ValueError:
                return float(value)
        return value

    def merge_from(self, other: "RouterInfoSnapshot") -> "RouterInfoSnapshot":
        """Return a copy where every field ``other`` reports overrides ours."""
        return self.model_copy(update=other.model_dump(exclude_none=True))

    @classmethod
    def request_keys(cls) -> Tuple[str, ...]:
        """Wire keys to request from ``RouterInfo``, in declaration order."""
        return tuple(field.alias for field in cls.model_fields.values() if field.alias)

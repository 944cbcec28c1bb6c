"""
Prometheus exposition for router snapshots and exporter self-metrics.
"""

from typing import Optional, Tuple

from prometheus_client import CollectorRegistry, Counter, Gauge, disable_created_metrics
from prometheus_client.exposition import choose_encoder

from shared.logging import get_logger
from ..i2pcontrol.types import RouterInfoSnapshot

NET_STATUS_STATES = ("ok", "firewalled", "unknown", "proxy", "mesh")

_unknown_status_logged = False


def net_status_state(code: int) -> str:
    """Map a network status code to its state label; unknown codes map to ``unknown``."""
    global _unknown_status_logged
    if 0 <= code < len(NET_STATUS_STATES):
        return NET_STATUS_STATES[code]
    if not _unknown_status_logged:
        _unknown_status_logged = True
        get_logger("exporter.prometheus").warning("Observed unknown net status code", code=code)
    return "unknown"


class PrometheusExporter:
    """Renders one scrape into the Prometheus or OpenMetrics text format."""

    def __init__(self):
        self.logger = get_logger("exporter.prometheus")
        # A fresh registry per scrape makes counter creation times meaningless
        disable_created_metrics()

    def encode(
        self,
        snapshot: Optional[RouterInfoSnapshot],
        scrape_duration_seconds: float,
        effective_timeout_seconds: Optional[float],
        last_scrape_error: bool,
        exporter_version: str,
        accept_header: Optional[str] = None,
    ) -> Tuple[bytes, str]:
        """Return ``(body, content_type)`` for one scrape.

        Router metrics appear only for fields present in ``snapshot``;
        exporter self-metrics are always emitted.
        """
        registry = self.build_registry(
            snapshot,
            scrape_duration_seconds,
            effective_timeout_seconds,
            last_scrape_error,
            exporter_version,
        )
        encoder, content_type = choose_encoder(accept_header or "")
        return encoder(registry), content_type

    def build_registry(
        self,
        snapshot: Optional[RouterInfoSnapshot],
        scrape_duration_seconds: float,
        effective_timeout_seconds: Optional[float],
        last_scrape_error: bool,
        exporter_version: str,
    ) -> CollectorRegistry:
        registry = CollectorRegistry(auto_describe=True)
        if snapshot is not None:
            self._add_router_metrics(registry, snapshot)
        self._add_exporter_metrics(
            registry,
            exporter_version,
            scrape_duration_seconds,
            effective_timeout_seconds,
            last_scrape_error,
        )
        return registry

    def _add_router_metrics(self, registry: CollectorRegistry, d: RouterInfoSnapshot) -> None:
        self._gauge(registry, "i2p_router_status", "Router status (1 or 0)", d.router_status)

        if d.router_version is not None:
            build_info = Gauge(
                "i2p_router_build_info", "Router build information", ["version"], registry=registry
            )
            build_info.labels(version=d.router_version).set(1)

        if d.router_uptime is not None:
            self._gauge(registry, "i2p_router_uptime_seconds", "Router uptime in seconds", d.router_uptime / 1000.0)

        bandwidth = [
            ("inbound", "1s", d.bw_inbound_1s),
            ("inbound", "15s", d.bw_inbound_15s),
            ("outbound", "1s", d.bw_outbound_1s),
            ("outbound", "15s", d.bw_outbound_15s),
            ("transit", "15s", d.bw_transit_15s),
        ]
        if any(value is not None for _, _, value in bandwidth):
            bw = Gauge(
                "i2p_router_net_bw_bytes_per_second",
                "Router bandwidth in bytes/sec",
                ["direction", "window"],
                registry=registry,
            )
            for direction, window, value in bandwidth:
                if value is not None:
                    bw.labels(direction=direction, window=window).set(value)

        self._net_status(registry, "i2p_router_net_status", "IPv4", d.net_status)
        self._net_status(registry, "i2p_router_net_status_v6", "IPv6", d.net_status_v6)

        self._gauge(registry, "i2p_router_net_error_code", "IPv4 network error code", d.net_error)
        self._gauge(registry, "i2p_router_net_error_v6_code", "IPv6 network error code", d.net_error_v6)
        self._gauge(registry, "i2p_router_net_testing", "IPv4 reachability test in progress (1 or 0)", d.net_testing)
        self._gauge(
            registry, "i2p_router_net_testing_v6", "IPv6 reachability test in progress (1 or 0)", d.net_testing_v6
        )

        self._gauge(
            registry,
            "i2p_router_tunnels_participating",
            "Number of active participating transit tunnels",
            d.tunnels_participating,
        )
        self._gauge(registry, "i2p_router_tunnels_inbound", "Number of inbound tunnels", d.tunnels_inbound)
        self._gauge(registry, "i2p_router_tunnels_outbound", "Number of outbound tunnels", d.tunnels_outbound)
        self._gauge(
            registry,
            "i2p_router_tunnels_success_ratio",
            "Tunnel build success rate as a ratio (0..1)",
            _percent_to_ratio(d.tunnels_successrate),
        )
        self._gauge(
            registry,
            "i2p_router_tunnels_total_success_ratio",
            "Aggregate tunnel build success rate as a ratio (0..1)",
            _percent_to_ratio(d.tunnels_total_successrate),
        )
        self._gauge(registry, "i2p_router_tunnels_queue", "Tunnel build queue size", d.tunnels_queue)
        self._gauge(
            registry, "i2p_router_tunnels_tbm_queue", "Transit build message queue size", d.tunnels_tbmqueue
        )

        self._gauge(
            registry, "i2p_router_netdb_activepeers", "Number of active known peers in NetDB", d.netdb_activepeers
        )
        self._gauge(
            registry,
            "i2p_router_netdb_knownpeers",
            "Total number of known peers (RouterInfos) in NetDB",
            d.netdb_knownpeers,
        )
        self._gauge(
            registry, "i2p_router_netdb_floodfills", "Number of floodfill routers known to NetDB", d.netdb_floodfills
        )
        self._gauge(registry, "i2p_router_netdb_leasesets", "Number of LeaseSets known to NetDB", d.netdb_leasesets)

        if d.net_total_received_bytes is not None or d.net_total_sent_bytes is not None:
            # prometheus_client appends `_total` to counter names
            totals = Counter(
                "i2p_router_net_bytes",
                "Total network bytes since router start",
                ["direction"],
                registry=registry,
            )
            if d.net_total_received_bytes is not None:
                totals.labels(direction="inbound").inc(d.net_total_received_bytes)
            if d.net_total_sent_bytes is not None:
                totals.labels(direction="outbound").inc(d.net_total_sent_bytes)

        if d.net_transit_sent_bytes is not None:
            transit = Counter(
                "i2p_router_net_transit_sent_bytes",
                "Total transit bytes sent since router start",
                registry=registry,
            )
            transit.inc(d.net_transit_sent_bytes)

    def _add_exporter_metrics(
        self,
        registry: CollectorRegistry,
        exporter_version: str,
        scrape_duration_seconds: float,
        effective_timeout_seconds: Optional[float],
        last_scrape_error: bool,
    ) -> None:
        build_info = Gauge(
            "i2pd_exporter_build_info", "Exporter build information", ["version"], registry=registry
        )
        build_info.labels(version=exporter_version).set(1)

        self._gauge(
            registry, "i2pd_exporter_scrape_duration_seconds", "Duration of last scrape", scrape_duration_seconds
        )
        self._gauge(
            registry,
            "i2pd_exporter_effective_scrape_timeout_seconds",
            "Computed effective scrape timeout budget",
            effective_timeout_seconds,
        )
        self._gauge(
            registry,
            "i2pd_exporter_last_scrape_error",
            "1 if the last scrape had an error, 0 otherwise",
            1 if last_scrape_error else 0,
        )

    def _net_status(self, registry: CollectorRegistry, name: str, family: str, code: Optional[int]) -> None:
        if code is None:
            return
        states = Gauge(
            name,
            f"{family} network status as states (ok, firewalled, unknown, proxy, mesh)",
            ["state"],
            registry=registry,
        )
        current = net_status_state(code)
        for state in NET_STATUS_STATES:
            states.labels(state=state).set(1 if state == current else 0)
        self._gauge(
            registry,
            f"{name}_code",
            f"{family} network status code (0=OK, 1=Firewalled, 2=Unknown, 3=Proxy, 4=Mesh)",
            code,
        )

    @staticmethod
    def _gauge(registry: CollectorRegistry, name: str, documentation: str, value: Optional[float]) -> None:
        if value is None:
            return
        Gauge(name, documentation, registry=registry).set(value)


def _percent_to_ratio(percent: Optional[float]) -> Optional[float]:
    if percent is None:
        return None
    return min(max(percent / 100.0, 0.0), 1.0)

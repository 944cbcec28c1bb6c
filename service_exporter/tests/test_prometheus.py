"""
Unit tests for Prometheus exposition.
"""

import pytest

from service_exporter.app.exporters import prometheus
from service_exporter.app.exporters.prometheus import PrometheusExporter, net_status_state
from service_exporter.app.i2pcontrol.types import RouterInfoSnapshot
from shared.test_helpers import metric_names, parse_samples, sample_value


class TestPrometheusExporter:
    """Test cases for PrometheusExporter."""

    @pytest.fixture
    def exporter(self):
        """Create PrometheusExporter instance."""
        return PrometheusExporter()

    @pytest.fixture
    def snapshot(self):
        """Router snapshot with a representative set of fields."""
        return RouterInfoSnapshot.model_validate({
            "i2p.router.status": "1",
            "i2p.router.version": "2.54.0",
            "i2p.router.uptime": 3723000,
            "i2p.router.net.bw.inbound.1s": 1024.5,
            "i2p.router.net.bw.outbound.15s": 1800.25,
            "i2p.router.net.bw.transit.15s": 512.0,
            "i2p.router.net.status": 1,
            "i2p.router.net.tunnels.participating": 42,
            "i2p.router.net.tunnels.successrate": 87,
            "i2p.router.netdb.knownpeers": 3400,
            "i2p.router.net.total.received.bytes": 1000.0,
            "i2p.router.net.total.sent.bytes": 2000.0,
        })

    def render(self, exporter, snapshot, error=False, accept=None):
        body, content_type = exporter.encode(
            snapshot,
            scrape_duration_seconds=0.25,
            effective_timeout_seconds=9.5,
            last_scrape_error=error,
            exporter_version="1.3.0",
            accept_header=accept,
        )
        return body.decode("utf-8"), content_type

    def test_router_metrics(self, exporter, snapshot):
        """Test present fields are rendered with converted units."""
        body, content_type = self.render(exporter, snapshot)
        samples = parse_samples(body)

        assert content_type.startswith("text/plain")
        assert sample_value(samples, "i2p_router_status") == 1
        assert sample_value(samples, "i2p_router_build_info", version="2.54.0") == 1
        assert sample_value(samples, "i2p_router_uptime_seconds") == pytest.approx(3723.0)
        assert sample_value(
            samples, "i2p_router_net_bw_bytes_per_second", direction="inbound", window="1s"
        ) == 1024.5
        assert sample_value(
            samples, "i2p_router_net_bw_bytes_per_second", direction="transit", window="15s"
        ) == 512.0
        assert sample_value(samples, "i2p_router_tunnels_participating") == 42
        assert sample_value(samples, "i2p_router_tunnels_success_ratio") == pytest.approx(0.87)
        assert sample_value(samples, "i2p_router_netdb_knownpeers") == 3400
        assert sample_value(samples, "i2p_router_net_bytes_total", direction="inbound") == 1000.0
        assert sample_value(samples, "i2p_router_net_bytes_total", direction="outbound") == 2000.0

    def test_absent_fields_are_not_rendered(self, exporter, snapshot):
        """Test missing fields produce no series rather than zeros."""
        body, _ = self.render(exporter, snapshot)
        names = metric_names(parse_samples(body))

        assert "i2p_router_net_status_v6" not in names
        assert "i2p_router_netdb_floodfills" not in names
        assert "i2p_router_tunnels_inbound" not in names
        assert "i2p_router_net_transit_sent_bytes_total" not in names
        assert ("i2p_router_net_bw_bytes_per_second", (("direction", "inbound"), ("window", "15s"))) \
            not in parse_samples(body)

    def test_net_status_one_hot(self, exporter, snapshot):
        """Test exactly one state series is set, plus the raw code."""
        body, _ = self.render(exporter, snapshot)
        samples = parse_samples(body)

        states = {
            state: sample_value(samples, "i2p_router_net_status", state=state)
            for state in prometheus.NET_STATUS_STATES
        }
        assert states == {"ok": 0, "firewalled": 1, "unknown": 0, "proxy": 0, "mesh": 0}
        assert sample_value(samples, "i2p_router_net_status_code") == 1

    def test_exporter_metrics_always_present(self, exporter):
        """Test self-metrics are emitted even with no snapshot."""
        body, _ = self.render(exporter, None, error=True)
        samples = parse_samples(body)

        assert sample_value(samples, "i2pd_exporter_build_info", version="1.3.0") == 1
        assert sample_value(samples, "i2pd_exporter_last_scrape_error") == 1
        assert sample_value(samples, "i2pd_exporter_scrape_duration_seconds") == 0.25
        assert sample_value(samples, "i2pd_exporter_effective_scrape_timeout_seconds") == 9.5
        assert not any(name.startswith("i2p_router_") for name in metric_names(samples))

    def test_no_created_series(self, exporter, snapshot):
        """Test counters carry no _created companion series."""
        body, _ = self.render(exporter, snapshot)

        assert "_created" not in body

    def test_openmetrics_negotiation(self, exporter, snapshot):
        """Test OpenMetrics is served when the scraper asks for it."""
        body, content_type = self.render(
            exporter, snapshot, accept="application/openmetrics-text; version=1.0.0"
        )

        assert content_type.startswith("application/openmetrics-text")
        assert body.endswith("# EOF\n")

    def test_success_ratio_is_clamped(self, exporter):
        """Test out-of-range percentages stay within 0..1."""
        snapshot = RouterInfoSnapshot(tunnels_successrate=140.0, tunnels_total_successrate=-5.0)

        body, _ = self.render(exporter, snapshot)
        samples = parse_samples(body)

        assert sample_value(samples, "i2p_router_tunnels_success_ratio") == 1.0
        assert sample_value(samples, "i2p_router_tunnels_total_success_ratio") == 0.0


class TestNetStatusState:
    """Test cases for net_status_state."""

    @pytest.mark.parametrize("code,state", [
        (0, "ok"),
        (1, "firewalled"),
        (2, "unknown"),
        (3, "proxy"),
        (4, "mesh"),
    ])
    def test_known_codes(self, code, state):
        """Test documented codes map to their state."""
        assert net_status_state(code) == state

    @pytest.mark.parametrize("code", [5, 99, -1])
    def test_unknown_codes(self, code):
        """Test unknown codes fall back to the unknown state."""
        assert net_status_state(code) == "unknown"

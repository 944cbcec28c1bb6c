"""
Unit tests for I2PControl result models.
"""

import pytest
from pydantic import ValidationError

from service_exporter.app.i2pcontrol.types import AuthResult, RouterInfoSnapshot


class TestRouterInfoSnapshot:
    """Test cases for RouterInfoSnapshot."""

    def test_parse_wire_keys(self):
        """Test dotted wire keys map onto fields."""
        snapshot = RouterInfoSnapshot.model_validate({
            "i2p.router.version": "2.54.0",
            "i2p.router.net.bw.inbound.1s": 12.5,
            "i2p.router.net.tunnels.participating": 7,
            "i2p.router.netdb.floodfills": 300,
        })

        assert snapshot.router_version == "2.54.0"
        assert snapshot.bw_inbound_1s == 12.5
        assert snapshot.tunnels_participating == 7
        assert snapshot.netdb_floodfills == 300
        assert snapshot.net_status is None

    def test_unknown_keys_are_ignored(self):
        """Test extra keys from newer routers do not fail parsing."""
        snapshot = RouterInfoSnapshot.model_validate({"i2p.router.something.new": 1})

        assert snapshot == RouterInfoSnapshot()

    @pytest.mark.parametrize("raw,expected", [
        ("1", 1),
        (" 0 ", 0),
        (1, 1),
        ("", None),
    ])
    def test_status_accepts_strings(self, raw, expected):
        """Test router status may arrive as a numeric string."""
        snapshot = RouterInfoSnapshot.model_validate({"i2p.router.status": raw})

        assert snapshot.router_status == expected

    def test_uptime_and_testing_accept_strings(self):
        """Test the other string-tolerant fields."""
        snapshot = RouterInfoSnapshot.model_validate({
            "i2p.router.uptime": "3600000",
            "i2p.router.net.testing": "1",
            "i2p.router.net.testing.v6": "0",
        })

        assert snapshot.router_uptime == 3600000
        assert snapshot.net_testing == 1
        assert snapshot.net_testing_v6 == 0

    def test_bad_number_is_rejected(self):
        """Test a non-numeric status is a validation error."""
        with pytest.raises(ValidationError):
            RouterInfoSnapshot.model_validate({"i2p.router.status": "up"})

    def test_snapshot_is_immutable(self):
        """Test snapshots cannot be modified in place."""
        snapshot = RouterInfoSnapshot(router_status=1)

        with pytest.raises(ValidationError):
            snapshot.router_status = 0

    def test_merge_overrides_present_fields(self):
        """Test merge takes every field the other snapshot reports."""
        base = RouterInfoSnapshot(router_status=1, router_version="2.53.0", netdb_knownpeers=10)
        update = RouterInfoSnapshot(router_version="2.54.0", tunnels_inbound=3)

        merged = base.merge_from(update)

        assert merged.router_status == 1
        assert merged.router_version == "2.54.0"
        assert merged.netdb_knownpeers == 10
        assert merged.tunnels_inbound == 3
        assert base.router_version == "2.53.0"

    def test_merge_with_empty_is_identity(self):
        """Test merging an empty snapshot changes nothing."""
        base = RouterInfoSnapshot(router_status=0, bw_outbound_15s=1.5)

        assert base.merge_from(RouterInfoSnapshot()) == base

    def test_request_keys(self):
        """Test request keys cover every field by wire name."""
        keys = RouterInfoSnapshot.request_keys()

        assert len(keys) == len(RouterInfoSnapshot.model_fields)
        assert len(set(keys)) == len(keys)
        assert "i2p.router.status" in keys
        assert "i2p.router.net.status.v6" in keys
        assert "i2p.router.net.transit.sent.bytes" in keys
        assert all(key.startswith("i2p.router.") for key in keys)


class TestAuthResult:
    """Test cases for AuthResult."""

    def test_token_alias(self):
        """Test the wire Token key populates token."""
        assert AuthResult.model_validate({"API": 1, "Token": "abc"}).token == "abc"

    def test_missing_token(self):
        """Test an absent Token parses as None."""
        assert AuthResult.model_validate({"API": 1}).token is None

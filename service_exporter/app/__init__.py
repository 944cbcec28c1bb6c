"""
i2pd exporter service package.

Serves `/metrics` for Prometheus: each scrape authenticates against the
router's I2PControl JSON-RPC API (sharing one session token across
concurrent scrapes), fetches RouterInfo within the scraper's declared
timeout, and renders the result with prometheus_client.
"""

__version__ = "1.3.0"

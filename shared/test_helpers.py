"""
Test helper functions and factory methods for the i2pd exporter.
"""

import asyncio
import json
from typing import Any, Callable, Dict, Optional, Tuple

import httpx
from prometheus_client.parser import text_string_to_metric_families

from .config import ExporterConfig

MOCK_BASE_URL = "http://i2pcontrol.test"
MOCK_JSONRPC_URL = f"{MOCK_BASE_URL}/jsonrpc"

Samples = Dict[Tuple[str, Tuple[Tuple[str, str], ...]], float]


def create_test_config(**overrides) -> ExporterConfig:
    """Exporter config pointed at the in-process mock router."""
    values: Dict[str, Any] = {
        "i2pcontrol_address": MOCK_BASE_URL,
        "i2pcontrol_password": "itoopie",
        "metrics_listen_addr": "127.0.0.1:9600",
        "max_scrape_timeout_seconds": 120.0,
        "startup_auth_timeout_seconds": 5.0,
    }
    values.update(overrides)
    return ExporterConfig(**values)


def asgi_client(app) -> httpx.AsyncClient:
    """httpx client that routes requests into an ASGI app in-process."""
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=MOCK_BASE_URL)


def handler_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """httpx client backed by a plain request handler."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=MOCK_BASE_URL)


def jsonrpc_result(result: Any) -> httpx.Response:
    return httpx.Response(200, json={"id": 1, "jsonrpc": "2.0", "result": result})


def jsonrpc_error(code: int, message: str) -> httpx.Response:
    return httpx.Response(200, json={"id": 1, "jsonrpc": "2.0", "error": {"code": code, "message": message}})


def raw_response(body: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=body.encode("utf-8"))


def request_json(request: httpx.Request) -> Dict[str, Any]:
    """Decode the JSON body of a captured request."""
    return json.loads(request.content)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def parse_samples(body: str) -> Samples:
    """Index every sample of a text exposition by ``(name, sorted labels)``."""
    samples: Samples = {}
    for family in text_string_to_metric_families(body):
        for sample in family.samples:
            samples[(sample.name, tuple(sorted(sample.labels.items())))] = sample.value
    return samples


def sample_value(samples: Samples, name: str, **labels: str) -> Optional[float]:
    return samples.get((name, tuple(sorted(labels.items()))))


def metric_names(samples: Samples) -> set:
    return {name for name, _ in samples}


def trickle_response(chunks: int = 90, delay_seconds: float = 0.05) -> httpx.Response:
    """200 response whose body arrives one byte at a time."""
    async def body():
        for _ in range(chunks):
            await asyncio.sleep(delay_seconds)
            yield b" "

    return httpx.Response(200, content=body())

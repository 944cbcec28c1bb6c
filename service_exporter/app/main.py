"""
I2PControl exporter service.
"""

import asyncio
import time
from typing import Dict, Optional

import httpx
from fastapi import Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from shared.base_service import BaseService
from shared.config import ExporterConfig, get_config
from shared.errors import ExporterError
from shared.logging import clear_context, set_scrape_id

from . import __version__
from .exporters.prometheus import PrometheusExporter
from .i2pcontrol import (
    CredentialStore,
    Deadline,
    DeadlineExceededError,
    I2pControlClient,
    JsonRpcTransport,
    RouterInfoSnapshot,
    RpcTransportError,
)
from .timeouts import SCRAPE_TIMEOUT_HEADER, resolve_scrape_timeout

NO_STORE = {"Cache-Control": "no-store"}


class ExporterService(BaseService):
    """Prometheus exporter for an i2pd router's I2PControl API."""

    version = __version__

    def __init__(self, config: Optional[ExporterConfig] = None, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__("exporter", config)

        self._owns_http_client = http_client is None
        self.http_client = http_client or self._build_http_client()
        self.transport = JsonRpcTransport(
            self.http_client,
            self.config.jsonrpc_url,
            debug_requests=self.config.debug_rpc_requests,
            debug_responses=self.config.debug_rpc_responses,
        )
        self.credentials = CredentialStore(self.transport, self.config.i2pcontrol_password)
        self.client = I2pControlClient(self.transport, self.credentials)
        self.exporter = PrometheusExporter()

        self._setup_exporter_routes()

    def _build_http_client(self) -> httpx.AsyncClient:
        """Create the shared outbound client for the control API."""
        if self.config.i2pcontrol_tls_insecure:
            self.logger.warning("I2PCONTROL_TLS_INSECURE set; accepting invalid TLS certificates")
        elif self.config.target_is_loopback:
            self.logger.info("Loopback target detected; allowing self-signed certificate")

        return httpx.AsyncClient(
            verify=not self.config.accept_invalid_certs,
            timeout=self.config.max_scrape_timeout_seconds,
            headers={"User-Agent": f"i2pd-exporter/{__version__}"},
        )

    def _setup_exporter_routes(self):
        """Set up exporter-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": self.service_name,
                "message": "i2pd exporter - Prometheus metrics for I2PControl",
                "version": self.version,
                "endpoints": ["/metrics", "/health"],
            }

        @self.app.get("/metrics")
        async def metrics(request: Request) -> Response:
            """Scrape the router and render metrics."""
            set_scrape_id()
            try:
                return await self.scrape(
                    timeout_hint=request.headers.get(SCRAPE_TIMEOUT_HEADER),
                    accept=request.headers.get("accept"),
                )
            finally:
                clear_context()

    async def scrape(self, timeout_hint: Optional[str], accept: Optional[str] = None) -> Response:
        """Run one scrape and build the HTTP response for it."""
        started = time.perf_counter()

        effective_timeout = resolve_scrape_timeout(timeout_hint, self.config.max_scrape_timeout_seconds)
        if effective_timeout is None:
            return PlainTextResponse(
                f"missing or invalid {SCRAPE_TIMEOUT_HEADER} header",
                status_code=400,
                headers=NO_STORE,
            )

        snapshot: Optional[RouterInfoSnapshot] = None
        try:
            snapshot = await asyncio.wait_for(
                self.client.fetch_router_info(effective_timeout),
                timeout=effective_timeout,
            )
            status_code = 200
        except asyncio.TimeoutError:
            self.logger.warning("Scrape timed out", effective_timeout_seconds=round(effective_timeout, 3))
            status_code = 504
        except ExporterError as e:
            self.logger.error("Failed to fetch metrics", code=e.code, error=e.message)
            status_code = 504 if _is_timeout(e) else 500

        body, content_type = self.exporter.encode(
            snapshot,
            scrape_duration_seconds=time.perf_counter() - started,
            effective_timeout_seconds=effective_timeout,
            last_scrape_error=snapshot is None,
            exporter_version=__version__,
            accept_header=accept,
        )
        return Response(
            content=body,
            status_code=status_code,
            headers={"Content-Type": content_type, **NO_STORE},
        )

    async def _check_dependencies(self) -> Dict[str, str]:
        """Report whether a session token is currently cached."""
        token = await self.credentials.current()
        return {"i2pcontrol_session": "authenticated" if token else "unauthenticated"}

    async def start(self):
        """Authenticate once up front; a failure here is retried on the first scrape."""
        if not self.credentials.has_password:
            return
        deadline = Deadline.after(self.config.startup_auth_timeout_seconds)
        try:
            await self.credentials.authenticate(deadline)
        except ExporterError as e:
            self.logger.error("Initial authentication failed", code=e.code, error=e.message)

    async def stop(self):
        """Release the outbound HTTP client."""
        if self._owns_http_client:
            await self.http_client.aclose()
        self.logger.info("Exporter service stopped")


def _is_timeout(error: ExporterError) -> bool:
    if isinstance(error, DeadlineExceededError):
        return True
    return isinstance(error, RpcTransportError) and error.is_timeout


def create_app():
    """Create exporter service application."""
    service = ExporterService()
    return service.app


def main():
    """Console entry point."""
    try:
        config = get_config()
    except ValidationError as e:
        raise SystemExit(f"invalid configuration: {e}") from e
    ExporterService(config).run()


if __name__ == "__main__":
    main()

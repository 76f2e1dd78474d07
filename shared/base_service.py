"""
Base service class for the mdlabels web proxy.
"""

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST
from contextlib import asynccontextmanager
from typing import Optional
import time

import uvicorn

from shared.config import ServiceConfig, get_config
from shared.logging import configure_logging, get_logger, set_request_id, clear_context
from shared.metrics import get_metrics_collector
from shared.errors import ProxyError
from shared.transport import TransportTimeoutMiddleware


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, service_name: str, config: Optional[ServiceConfig] = None):
        self.service_name = service_name
        self.config = config or get_config(service_name)

        configure_logging(service_name, self.config.log_level)
        self.logger = get_logger(service_name)
        self.metrics = get_metrics_collector(service_name, self.config.app_version)

        self.app = self._create_app()
        self._setup_middleware()
        self._setup_routes()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""
        # Interactive docs would shadow SPA paths, so only expose them in dev
        development = self.config.is_development
        return FastAPI(
            title=f"mdlabels {self.service_name}",
            version=self.config.app_version,
            lifespan=self._lifespan,
            docs_url="/docs" if development else None,
            redoc_url=None,
            openapi_url="/openapi.json" if development else None,
        )

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        self.logger.info(
            "Starting server",
            port=self.config.port,
            mode=self.config.mode_label,
            version=self.config.app_version,
        )
        await self.on_startup()
        yield
        self.logger.info("Shutting down server...")
        await self.on_shutdown()

    async def on_startup(self):
        """Hook for subclasses."""

    async def on_shutdown(self):
        """Hook for subclasses; release connection pools here."""

    def _setup_middleware(self):
        """Set up middleware.

        Starlette runs the last added middleware first, so the chain is:
        transport deadlines -> request logging -> CORS (development only).
        """
        if self.config.is_development:
            self.app.add_middleware(
                CORSMiddleware,
                allow_origins=[self.config.dev_server_origin],
                allow_methods=["GET", "OPTIONS"],
                allow_headers=["Content-Type"],
            )

        @self.app.middleware("http")
        async def log_requests(request: Request, call_next):
            request_id = set_request_id(request.headers.get("X-Request-ID"))
            start_time = time.time()

            try:
                response = await call_next(request)
            finally:
                clear_context()

            duration = time.time() - start_time
            route = request.scope.get("route")
            endpoint = getattr(route, "path", "unmatched")

            self.metrics.record_http_request(
                method=request.method,
                endpoint=endpoint,
                status_code=response.status_code,
                duration=duration
            )

            self.logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
                request_id=request_id,
            )

            response.headers["X-Request-ID"] = request_id
            return response

        self.app.add_middleware(
            TransportTimeoutMiddleware,
            read_timeout=self.config.read_timeout,
            write_timeout=self.config.write_timeout,
        )

    def _setup_routes(self):
        """Set up common routes."""

        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            return {
                "status": "ok",
                "mode": self.config.mode,
                "version": self.config.app_version,
            }

        @self.app.get("/metrics")
        async def metrics_endpoint():
            """Prometheus metrics endpoint."""
            return Response(
                content=self.metrics.export(),
                media_type=CONTENT_TYPE_LATEST
            )

        if self.config.is_development:
            # CORSMiddleware only answers real preflights; any other OPTIONS
            # from the dev server's tooling still gets a plain 200
            @self.app.options("/{options_path:path}")
            async def options_ok(options_path: str):
                return Response(status_code=200)

        @self.app.exception_handler(ProxyError)
        async def proxy_error_handler(request: Request, exc: ProxyError):
            """Handle ProxyError and its subclasses."""
            log = self.logger.error if exc.status_code >= 500 else self.logger.warning
            log(
                "Request failed",
                path=request.url.path,
                code=exc.code,
                message=exc.message,
                status_code=exc.status_code,
                details=exc.details
            )
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_response().model_dump()
            )

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle general exceptions."""
            self.logger.error("Unhandled exception", path=request.url.path, error=str(exc), exc_info=True)
            return JSONResponse(
                status_code=500,
                content={
                    "code": "INTERNAL_ERROR",
                    "message": "Internal server error",
                    "details": {}
                }
            )

    def run(self):
        """Run the service until interrupted.

        uvicorn traps SIGINT/SIGTERM, stops accepting connections and lets
        in-flight requests finish until the shutdown deadline passes.
        """
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower(),
            access_log=False,
            timeout_keep_alive=int(self.config.idle_timeout),
            timeout_graceful_shutdown=int(self.config.shutdown_timeout),
        )

"""
Shared utilities for the mdlabels web proxy.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- transport: Read/write deadlines at the ASGI layer
- base_service: FastAPI application scaffolding and the uvicorn runner

Do not import from service_* packages into shared/.
"""

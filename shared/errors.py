"""
Shared error handling for the mdlabels web proxy.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ProxyError(Exception):
    """Base exception for the proxy; carries the HTTP status it maps to."""

    status_code = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None,
                 status_code: Optional[int] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(ProxyError):
    """Client input errors."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class NotFoundError(ProxyError):
    """Requested resource does not exist."""

    status_code = 404

    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class ExternalServiceError(ProxyError):
    """Upstream unreachable or transport failure."""

    status_code = 502

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)


class UpstreamStatusError(ProxyError):
    """Upstream answered with a non-success status, mirrored to the caller."""

    def __init__(self, service: str, upstream_status: int, details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        details["upstream_status"] = upstream_status
        # Only error statuses can be mirrored on an error body
        status_code = upstream_status if upstream_status >= 400 else 502
        super().__init__(
            "UPSTREAM_STATUS_ERROR",
            f"{service} API error: {upstream_status}",
            details,
            status_code=status_code,
        )


class PayloadError(ProxyError):
    """Local failure while reading or encoding an upstream payload."""

    status_code = 500

    def __init__(self, message: str = "Failed to read upstream payload", details: Optional[Dict[str, Any]] = None):
        super().__init__("PAYLOAD_ERROR", message, details)


class AssetTreeMissingError(ProxyError):
    """The bundled frontend could not be found at startup."""

    def __init__(self, root: str, message: str = "Static asset tree not found"):
        super().__init__("SERVICE_ERROR", f"{message}: {root}", {"root": root})

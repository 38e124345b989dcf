"""
Gateway error taxonomy.

Both the live and the simulated gateway raise only these types, so callers
can handle failures without knowing which backend is active. Raw transport
details (HTTP status, response body) travel in ``details`` and are never
the primary signal.
"""

from typing import Any, Dict, Optional


class GatewayError(Exception):
    """Base class for every error a payment gateway raises."""

    code = "gateway_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(GatewayError):
    """
    Malformed caller input.

    Never retried: the caller has to fix the request.
    """

    code = "validation_error"


class AuthError(GatewayError):
    """Missing or rejected credentials. Fatal until an operator fixes config."""

    code = "auth_error"


class NotFoundError(GatewayError):
    """Unknown payer or unknown reference id."""

    code = "not_found"


class DuplicateError(GatewayError):
    """The provider reports a conflicting in-flight request."""

    code = "duplicate"


class UpstreamError(GatewayError):
    """Transient provider-side failure (5xx, connection errors)."""

    code = "upstream_error"


class UpstreamTimeoutError(UpstreamError):
    code = "upstream_timeout"


class ProtocolError(UpstreamError):
    """The provider answered, but not with something we understand."""

    code = "protocol_error"


__all__ = [
    "GatewayError",
    "ValidationError",
    "AuthError",
    "NotFoundError",
    "DuplicateError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "ProtocolError",
]

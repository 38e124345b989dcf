"""Translate gateway errors into HTTP status codes and response payloads."""
from typing import Any, Dict, Optional, Tuple
import logging

from safaritix.integrations.contracts.errors import (
    AuthError,
    DuplicateError,
    GatewayError,
    NotFoundError,
    UpstreamError,
    UpstreamTimeoutError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first: UpstreamTimeoutError is also an UpstreamError.
_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (DuplicateError, 409),
    (UpstreamTimeoutError, 504),
    (AuthError, 502),
    (UpstreamError, 502),
)


class ErrorHandler:
    def status_for(self, exc: GatewayError) -> int:
        for error_type, status in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                return status
        return 500

    def handle_exception(self, exc: Exception, context: Optional[Dict[str, Any]] = None) -> Tuple[int, Dict[str, Any]]:
        if isinstance(exc, GatewayError):
            status = self.status_for(exc)
            log = logger.warning if status < 500 else logger.error
            log("Payment gateway error (%s): %s", exc.code, exc.message)
            payload = exc.to_dict()
            # Upstream bodies stay in the logs, not in client responses.
            payload["details"] = {k: v for k, v in exc.details.items() if k != "body"}
            if context:
                payload["context"] = context
            return status, payload

        logger.error("Unhandled exception in payment API: %s", exc, exc_info=True)
        return 500, {
            "error_code": "internal_error",
            "message": "An internal error occurred while processing your payment. Please try again later.",
            "details": {"error": str(exc), "context": context or {}},
        }

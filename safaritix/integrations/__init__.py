"""
Integrations layer.
This package contains all code used to communicate with MTN Mobile Money:
- the shared gateway contract and error taxonomy (contracts/)
- the simulated gateway used in development and tests (clients/mocks/)
- the real HTTP gateway against the MTN Collection API (clients/real_http/)

Key rule:
- The checkout flow MUST NOT call MTN directly.
- It drives validate -> request_to_pay -> check_transaction_status through
  a PaymentGateway instance and never asks which implementation it holds.

Switching implementations:
- The selection of simulated vs live happens in ONE place (selector.py),
  called once at startup by safaritix/api/main.py.
"""

from .contracts.errors import (
    AuthError,
    DuplicateError,
    GatewayError,
    NotFoundError,
    ProtocolError,
    UpstreamError,
    UpstreamTimeoutError,
    ValidationError,
)
from .contracts.interfaces import (
    AccessToken,
    AccountBalance,
    AccountHolder,
    FailureReason,
    GatewayMode,
    PaymentGateway,
    PaymentProcessingResult,
    PaymentRequest,
    Transaction,
    TransactionStatus,
)
from .contracts.payments import (
    is_terminal_status,
    normalize_phone_number,
    validate_payment_request,
)

__all__ = [
    # interfaces
    "AccessToken", "AccountBalance", "AccountHolder", "FailureReason",
    "GatewayMode", "PaymentGateway", "PaymentProcessingResult",
    "PaymentRequest", "Transaction", "TransactionStatus",
    # payments
    "is_terminal_status", "normalize_phone_number", "validate_payment_request",
    # errors
    "GatewayError", "ValidationError", "AuthError", "NotFoundError",
    "DuplicateError", "UpstreamError", "UpstreamTimeoutError", "ProtocolError",
]

import re
from decimal import Decimal, InvalidOperation
from typing import List

from .errors import ValidationError
from .interfaces import PaymentRequest, TransactionStatus

"""
Payment contract: validation and normalization helpers shared by the
live (clients/real_http/mtn.py) and simulated (clients/mocks/mtn.py)
gateways.

Both gateways run these checks before touching the network or the store,
so a malformed request fails the same way in either mode.
"""

DEFAULT_PAYER_MESSAGE = "SafariTix Bus Ticket Payment"
DEFAULT_PAYEE_NOTE = "Payment for ticket {external_id}"

_WHITESPACE_AND_PLUS = re.compile(r"[\s+]")


# ---------------------------------------------------------------------------
# Normalization helpers
# ---------------------------------------------------------------------------

def normalize_phone_number(phone_number: str) -> str:
    """Strip '+' and whitespace: '+250 788 123 456' -> '250788123456'."""
    return _WHITESPACE_AND_PLUS.sub("", phone_number or "")


def mask_phone_number(phone_number: str) -> str:
    """Log-safe form of a phone number (last 4 digits only)."""
    return f"***{normalize_phone_number(phone_number)[-4:]}"


def payer_message_for(request: PaymentRequest) -> str:
    return request.payer_message or DEFAULT_PAYER_MESSAGE


def payee_note_for(request: PaymentRequest) -> str:
    return request.payee_note or DEFAULT_PAYEE_NOTE.format(external_id=request.external_id)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def validate_payment_request(request: PaymentRequest) -> List[str]:
    """
    Return a list of validation errors.
    Empty list means the request is valid.
    """
    errors: List[str] = []

    try:
        amount = Decimal(str(request.amount))
    except (InvalidOperation, TypeError, ValueError):
        errors.append(f"amount {request.amount!r} is not a number")
    else:
        if not amount.is_finite() or amount <= 0:
            errors.append("amount must be greater than zero")

    if not (request.currency or "").strip():
        errors.append("currency is required")
    if not (request.external_id or "").strip():
        errors.append("external_id is required")

    phone = normalize_phone_number(request.payer)
    if not phone:
        errors.append("payer phone number is required")
    elif not phone.isdigit():
        errors.append(f"payer '{request.payer}' must contain digits only")

    return errors


def ensure_valid_payment_request(request: PaymentRequest) -> None:
    """Raise ValidationError listing every problem with the request."""
    errors = validate_payment_request(request)
    if errors:
        raise ValidationError("; ".join(errors), details={"errors": errors})


def ensure_valid_payer(payer: str) -> str:
    """Normalize a payer id or raise ValidationError."""
    phone = normalize_phone_number(payer)
    if not phone or not phone.isdigit():
        raise ValidationError(f"Invalid payer phone number {payer!r}.", details={"payer": payer})
    return phone


def ensure_valid_reference_id(reference_id: str) -> str:
    """Strip a reference id or raise ValidationError if it is blank."""
    value = (reference_id or "").strip()
    if not value:
        raise ValidationError("Reference ID is required to check transaction status.")
    return value


def is_terminal_status(status: TransactionStatus) -> bool:
    """Return True if the payment has reached a final, non-changeable state."""
    return status in {TransactionStatus.SUCCESSFUL, TransactionStatus.FAILED}

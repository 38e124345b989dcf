from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from safaritix.integrations.contracts.errors import ProtocolError
from safaritix.integrations.contracts.interfaces import (
    AccountBalance,
    AccountHolder,
    Transaction,
    TransactionStatus,
)


class TokenResponseModel(BaseModel):
    access_token: str = Field(min_length=1)
    token_type: str = "access_token"
    expires_in: int = Field(default=3600, ge=0)


class TransactionStatusModel(BaseModel):
    reference_id: str
    external_id: str = ""
    amount: Decimal
    currency: str
    payer: str = ""
    status: TransactionStatus
    reason: Optional[str] = None
    financial_transaction_id: Optional[str] = None
    payer_message: Optional[str] = None
    payee_note: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class BalanceResponseModel(BaseModel):
    available: Decimal = Field(ge=0)
    currency: str
    raw: Dict[str, Any] = Field(default_factory=dict)


class AccountHolderStatusModel(BaseModel):
    payer: str
    is_active: bool
    raw: Dict[str, Any] = Field(default_factory=dict)


def normalize_token_response(raw: Any) -> TokenResponseModel:
    if not isinstance(raw, dict) or not str(raw.get("access_token") or "").strip():
        raise ProtocolError("Invalid token response from MTN API", details={"body": raw})
    return _build_model(
        TokenResponseModel,
        {
            "access_token": str(raw["access_token"]).strip(),
            "token_type": str(raw.get("token_type") or "access_token"),
            "expires_in": raw.get("expires_in", 3600),
        },
        raw,
    )


def normalize_transaction_response(raw: Any, *, reference_id: str) -> Transaction:
    data = _require_object(raw, "transaction status")
    payer = data.get("payer") if isinstance(data.get("payer"), dict) else {}
    status = _map_transaction_status(_first_non_empty(data, "status"))
    reason = _extract_reason(data.get("reason")) if status is TransactionStatus.FAILED else None

    model = _build_model(
        TransactionStatusModel,
        {
            "reference_id": reference_id,
            "external_id": str(_first_non_empty(data, "externalId", "external_id", default="")),
            "amount": _coerce_amount(_first_non_empty(data, "amount"), "transaction amount"),
            "currency": str(_first_non_empty(data, "currency")).upper(),
            "payer": str(payer.get("partyId") or ""),
            "status": status,
            "reason": reason,
            "financial_transaction_id": data.get("financialTransactionId") or None,
            "payer_message": data.get("payerMessage"),
            "payee_note": data.get("payeeNote"),
            "raw": data,
        },
        data,
    )
    return Transaction(
        reference_id=model.reference_id,
        external_id=model.external_id,
        amount=model.amount,
        currency=model.currency,
        payer=model.payer,
        status=model.status,
        reason=model.reason,
        financial_transaction_id=model.financial_transaction_id,
        payer_message=model.payer_message,
        payee_note=model.payee_note,
    )


def normalize_balance_response(raw: Any) -> AccountBalance:
    data = _require_object(raw, "account balance")
    model = _build_model(
        BalanceResponseModel,
        {
            "available": _coerce_amount(_first_non_empty(data, "availableBalance", "available_balance"), "available balance"),
            "currency": str(_first_non_empty(data, "currency")).upper(),
            "raw": data,
        },
        data,
    )
    return AccountBalance(available=model.available, currency=model.currency)


def normalize_account_holder_response(raw: Any, *, payer: str) -> AccountHolder:
    data = _require_object(raw, "account holder")
    result = data.get("result")
    if not isinstance(result, bool):
        raise ProtocolError(f"Unexpected account holder result {result!r}.", details={"body": data})
    model = _build_model(AccountHolderStatusModel, {"payer": payer, "is_active": result, "raw": data}, data)
    return AccountHolder(payer=model.payer, is_active=model.is_active)


def _require_object(raw: Any, label: str) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise ProtocolError(f"Expected a JSON object for {label}; got {type(raw).__name__}.", details={"body": raw})
    return raw


def _first_non_empty(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    if default is not None:
        return default
    raise ProtocolError(f"Missing required field. Checked keys: {', '.join(keys)}", details={"body": data})


def _coerce_amount(value: Any, label: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ProtocolError(f"Invalid {label}: {value!r}") from exc
    if not amount.is_finite() or amount < 0:
        raise ProtocolError(f"{label.capitalize()} must be >= 0; got {value!r}.")
    return amount


def _extract_reason(value: Any) -> Optional[str]:
    # Older API versions send {"code": ..., "message": ...}
    if isinstance(value, dict):
        value = value.get("code") or value.get("message")
    return str(value) if value else None


def _map_transaction_status(raw_status: Any) -> TransactionStatus:
    value = str(raw_status or "").strip().upper()
    mapping = {
        "PENDING": TransactionStatus.PENDING,
        "CREATED": TransactionStatus.PENDING,
        "ONGOING": TransactionStatus.PENDING,
        "SUCCESSFUL": TransactionStatus.SUCCESSFUL,
        "SUCCESS": TransactionStatus.SUCCESSFUL,
        "COMPLETED": TransactionStatus.SUCCESSFUL,
        "FAILED": TransactionStatus.FAILED,
        "REJECTED": TransactionStatus.FAILED,
        "TIMEOUT": TransactionStatus.FAILED,
        "EXPIRED": TransactionStatus.FAILED,
    }
    if value not in mapping:
        raise ProtocolError(f"Unsupported transaction status '{value}'.")
    return mapping[value]


def _build_model(model_type, payload: Dict[str, Any], raw: Dict[str, Any]):
    try:
        return model_type(**payload)
    except ValidationError as exc:
        raise ProtocolError(f"Response validation failed: {exc}", details={"body": raw}) from exc

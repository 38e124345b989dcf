from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from safaritix.api.dependencies import get_payment_gateway
from safaritix.integrations.contracts.interfaces import (
    AccountBalance,
    AccountHolder,
    PaymentGateway,
    PaymentRequest,
    Transaction,
)

api = APIRouter()
payments_api = api


class MTNPaymentInitiateRequest(BaseModel):
    amount: Decimal
    currency: str = "RWF"
    phone_number: str = Field(..., description="Payer MSISDN, e.g. 250788123456")
    external_id: str = Field(..., description="Caller's business reference, e.g. ticket or booking id")
    payer_message: Optional[str] = None
    payee_note: Optional[str] = None


class MTNValidateRequest(BaseModel):
    phone_number: str


@api.post("/mtn/initiate", tags=["Payments"], status_code=status.HTTP_202_ACCEPTED)
async def initiate_mtn_payment(
    request: MTNPaymentInitiateRequest,
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    payment_request = PaymentRequest(
        amount=request.amount,
        currency=request.currency,
        payer=request.phone_number,
        external_id=request.external_id,
        payer_message=request.payer_message,
        payee_note=request.payee_note,
    )
    result = await gateway.process_payment(payment_request)
    return {
        "success": True,
        "reference_id": result.transaction.reference_id,
        "external_id": result.transaction.external_id,
        "status": result.transaction.status.value,
        "message": result.message,
        "account_holder": _account_holder_to_dict(result.account_holder),
        "transaction": _transaction_to_dict(result.transaction),
    }


@api.get("/mtn/status/{reference_id}", tags=["Payments"])
async def check_mtn_payment_status(
    reference_id: str,
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    transaction = await gateway.check_transaction_status(reference_id)
    return {"success": True, **_transaction_to_dict(transaction)}


@api.post("/mtn/validate", tags=["Payments"])
async def validate_mtn_phone_number(
    request: MTNValidateRequest,
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    holder = await gateway.validate_account_holder(request.phone_number)
    return {"success": True, **_account_holder_to_dict(holder)}


@api.get("/mtn/balance", tags=["Payments"])
async def get_mtn_balance(gateway: PaymentGateway = Depends(get_payment_gateway)):
    balance = await gateway.get_account_balance()
    return {"success": True, **_balance_to_dict(balance)}


def _transaction_to_dict(transaction: Transaction) -> Dict[str, Any]:
    return {
        "reference_id": transaction.reference_id,
        "external_id": transaction.external_id,
        "amount": str(transaction.amount),
        "currency": transaction.currency,
        "payer": transaction.payer,
        "status": transaction.status.value,
        "reason": transaction.reason,
        "financial_transaction_id": transaction.financial_transaction_id,
        "created_at": transaction.created_at.isoformat() if transaction.created_at else None,
        "completed_at": transaction.completed_at.isoformat() if transaction.completed_at else None,
    }


def _account_holder_to_dict(holder: AccountHolder) -> Dict[str, Any]:
    return {"phone_number": holder.payer, "is_active": holder.is_active, "name": holder.name}


def _balance_to_dict(balance: AccountBalance) -> Dict[str, Any]:
    return {"available_balance": str(balance.available), "currency": balance.currency}

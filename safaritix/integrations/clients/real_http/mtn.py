"""
Real MTN MoMo Collection HTTP gateway.

Used when the gateway mode is "live". Talks to the sandbox or production
collection API through httpx, translating every upstream failure into the
GatewayError taxonomy before it reaches the caller.

Implementation notes:
- Every caller-visible operation gets its own X-Correlation-ID; the single
  retry after a 401 reuses it so MTN can recognise the repeated attempt.
- Timeouts are surfaced, never retried here. Whether to retry a
  request_to_pay after a timeout is the caller's call.
- Transaction state is never cached: each status check is a round trip.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

import httpx

from safaritix.integrations.clients.real_http.mtn_auth import MTNTokenProvider
from safaritix.integrations.contracts.errors import (
    AuthError,
    DuplicateError,
    NotFoundError,
    ProtocolError,
    UpstreamError,
    UpstreamTimeoutError,
    ValidationError,
)
from safaritix.integrations.contracts.interfaces import (
    AccountBalance,
    AccountHolder,
    GatewayMode,
    PaymentGateway,
    PaymentRequest,
    Transaction,
    TransactionStatus,
)
from safaritix.integrations.contracts.payments import (
    ensure_valid_payer,
    ensure_valid_payment_request,
    ensure_valid_reference_id,
    mask_phone_number,
    normalize_phone_number,
    payee_note_for,
    payer_message_for,
)
from safaritix.integrations.policy.response_wrappers import (
    normalize_account_holder_response,
    normalize_balance_response,
    normalize_transaction_response,
)

logger = logging.getLogger(__name__)

API_VERSION = "v1_0"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MTNMomoGateway(PaymentGateway):
    def __init__(
        self,
        base_url: str,
        subscription_key: Optional[str],
        api_user: Optional[str],
        api_key: Optional[str],
        target_environment: str = "sandbox",
        *,
        callback_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        token_provider: Optional[MTNTokenProvider] = None,
        write_timeout_seconds: float = 30.0,
        read_timeout_seconds: float = 10.0,
        token_timeout_seconds: float = 30.0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.subscription_key = subscription_key or ""
        self.target_environment = target_environment
        self.callback_url = callback_url
        self.write_timeout_seconds = write_timeout_seconds
        self.read_timeout_seconds = read_timeout_seconds
        self._clock = clock
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient()
        self._tokens = token_provider or MTNTokenProvider(
            self.base_url,
            subscription_key,
            api_user,
            api_key,
            http_client=self._client,
            timeout_seconds=token_timeout_seconds,
            clock=clock,
        )
        if not self.base_url:
            logger.warning("MTN collection base URL is not set.")

    @property
    def mode(self) -> GatewayMode:
        return GatewayMode.LIVE

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
        await self._tokens.aclose()

    # ------------------------------------------------------------------
    # Gateway contract
    # ------------------------------------------------------------------

    async def validate_account_holder(self, payer: str) -> AccountHolder:
        phone = ensure_valid_payer(payer)
        response = await self._send(
            "GET",
            f"/{API_VERSION}/accountholder/msisdn/{phone}/active",
            operation="validate_account_holder",
            timeout=self.read_timeout_seconds,
        )
        self._raise_for_status(
            response,
            "validate_account_holder",
            not_found="Phone number not registered with MTN Mobile Money",
            details={"payer": phone},
        )
        holder = normalize_account_holder_response(self._json(response), payer=phone)
        if not holder.is_active:
            logger.info("[MTN] Account %s not found or inactive", mask_phone_number(phone))
            raise NotFoundError(
                "Phone number not registered with MTN Mobile Money",
                details={"payer": phone},
            )
        return holder

    async def request_to_pay(self, request: PaymentRequest) -> Transaction:
        ensure_valid_payment_request(request)

        reference_id = str(uuid.uuid4())
        phone = normalize_phone_number(request.payer)
        amount = Decimal(str(request.amount))
        payer_message = payer_message_for(request)
        payee_note = payee_note_for(request)
        body = {
            "amount": str(amount),
            "currency": request.currency,
            "externalId": request.external_id,
            "payer": {"partyIdType": "MSISDN", "partyId": phone},
            "payerMessage": payer_message,
            "payeeNote": payee_note,
        }
        headers = {"X-Reference-Id": reference_id}
        if self.callback_url:
            headers["X-Callback-Url"] = self.callback_url

        logger.info("[MTN] Sending request-to-pay ref=%s amount=%s %s phone=%s",
                    reference_id, body["amount"], request.currency, mask_phone_number(phone))

        response = await self._send(
            "POST",
            f"/{API_VERSION}/requesttopay",
            operation="request_to_pay",
            timeout=self.write_timeout_seconds,
            json=body,
            headers=headers,
        )
        self._raise_for_status(response, "request_to_pay", details={"reference_id": reference_id})
        if response.status_code != 202:
            raise ProtocolError(
                f"Unexpected response status: {response.status_code}",
                details={"status_code": response.status_code, "body": response.text},
            )

        logger.info("[MTN] Request-to-pay %s accepted; waiting for customer approval", reference_id)
        return Transaction(
            reference_id=reference_id,
            external_id=request.external_id,
            amount=amount,
            currency=request.currency,
            payer=phone,
            status=TransactionStatus.PENDING,
            payer_message=payer_message,
            payee_note=payee_note,
            created_at=self._clock(),
        )

    async def check_transaction_status(self, reference_id: str) -> Transaction:
        reference_id = ensure_valid_reference_id(reference_id)

        response = await self._send(
            "GET",
            f"/{API_VERSION}/requesttopay/{reference_id}",
            operation="check_transaction_status",
            timeout=self.read_timeout_seconds,
        )
        self._raise_for_status(
            response,
            "check_transaction_status",
            not_found="Transaction not found. Invalid reference ID.",
            details={"reference_id": reference_id},
        )
        transaction = normalize_transaction_response(self._json(response), reference_id=reference_id)
        logger.info("[MTN] Transaction %s status: %s", reference_id, transaction.status.value)
        return transaction

    async def get_account_balance(self) -> AccountBalance:
        response = await self._send(
            "GET",
            f"/{API_VERSION}/account/balance",
            operation="get_account_balance",
            timeout=self.read_timeout_seconds,
        )
        self._raise_for_status(response, "get_account_balance")
        return normalize_balance_response(self._json(response))

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        timeout: float,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        correlation_id = str(uuid.uuid4())

        for attempt in (1, 2):
            token = await self._tokens.get_access_token()
            request_headers = {
                "Authorization": f"Bearer {token.token}",
                "X-Target-Environment": self.target_environment,
                "Ocp-Apim-Subscription-Key": self.subscription_key,
                "X-Correlation-ID": correlation_id,
                **(headers or {}),
            }
            if json is not None:
                request_headers["Content-Type"] = "application/json"

            try:
                response = await self._client.request(
                    method, url, json=json, headers=request_headers, timeout=timeout
                )
            except httpx.TimeoutException as exc:
                logger.error("[MTN] %s timed out after %ss", operation, timeout)
                raise UpstreamTimeoutError(
                    f"MTN API did not respond in time ({operation})",
                    details={"operation": operation, "timeout_seconds": timeout},
                ) from exc
            except httpx.RequestError as exc:
                logger.error("[MTN] %s request failed: %s", operation, exc)
                raise UpstreamError(
                    f"Failed to reach MTN API ({operation}): {exc}",
                    details={"operation": operation},
                ) from exc

            if response.status_code != 401:
                return response

            logger.warning("[MTN] %s got 401 on attempt %d; refreshing access token", operation, attempt)
            self._tokens.invalidate(token)

        logger.error("[MTN] %s still unauthorized after token refresh: %s", operation, response.text)
        raise AuthError(
            "MTN API rejected a freshly issued access token.",
            details={"operation": operation, "status_code": 401, "body": response.text},
        )

    def _raise_for_status(
        self,
        response: httpx.Response,
        operation: str,
        *,
        not_found: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        status = response.status_code
        if status < 400:
            return

        logger.error("[MTN] %s failed: %s %s", operation, status, response.text)
        error_details = {**(details or {}), "operation": operation, "status_code": status, "body": response.text}

        if status == 400:
            raise ValidationError(f"Invalid request: {self._upstream_message(response)}", details=error_details)
        if status == 403:
            raise AuthError("MTN API access forbidden. Verify your subscription key.", details=error_details)
        if status == 404 and not_found:
            raise NotFoundError(not_found, details=error_details)
        if status == 409:
            raise DuplicateError(
                "Duplicate transaction. This payment request already exists.", details=error_details
            )
        if status >= 500:
            raise UpstreamError("MTN API server error. Please try again later.", details=error_details)
        raise UpstreamError(f"MTN API returned HTTP {status} for {operation}", details=error_details)

    @staticmethod
    def _upstream_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text or "Bad request to MTN API"
        if isinstance(data, dict):
            return str(data.get("message") or data.get("code") or "Bad request to MTN API")
        return "Bad request to MTN API"

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ProtocolError(
                "MTN API returned a non-JSON body",
                details={"status_code": response.status_code, "body": response.text},
            ) from exc

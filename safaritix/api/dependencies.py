import hmac
import logging
import os
from typing import List, Optional

from fastapi import Header, HTTPException, Request, status

from safaritix.integrations.contracts.interfaces import PaymentGateway

logger = logging.getLogger(__name__)

# Probes and API docs stay reachable without a key.
_OPEN_PATHS = frozenset({
    "/health",
    "/docs",
    "/docs/oauth2-redirect",
    "/openapi.json",
    "/redoc",
})


def get_api_keys() -> List[str]:
    """Comma separated API_KEYS; empty means the guard is off (local development)."""
    raw = os.getenv("API_KEYS", "")
    return [key.strip() for key in raw.split(",") if key.strip()]


def _key_matches(candidate: str, valid_keys: List[str]) -> bool:
    return any(hmac.compare_digest(candidate, key) for key in valid_keys)


async def api_key_protection(
    request: Request,
    x_api_key: Optional[str] = Header(default=None, alias="X-API-KEY"),
) -> None:
    if request.url.path in _OPEN_PATHS:
        return

    valid_keys = get_api_keys()
    if not valid_keys:
        return

    candidate = (x_api_key or "").strip()
    if candidate and _key_matches(candidate, valid_keys):
        return

    logger.info("Rejected payments API call: path=%s header_present=%s", request.url.path, bool(x_api_key))
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing API Key",
    )


def get_payment_gateway(request: Request) -> PaymentGateway:
    """The gateway chosen once at startup by create_app()."""
    return request.app.state.payment_gateway

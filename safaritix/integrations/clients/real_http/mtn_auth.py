"""
MTN MoMo access token provider.

Exchanges the API user / API key pair (HTTP Basic) for a bearer token and
keeps it until shortly before it expires. A single asyncio.Lock makes the
refresh single-flight: concurrent callers wait for the one in-flight fetch
instead of each hitting the token endpoint.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import httpx

from safaritix.integrations.contracts.errors import (
    AuthError,
    ProtocolError,
    UpstreamError,
    UpstreamTimeoutError,
)
from safaritix.integrations.contracts.interfaces import AccessToken
from safaritix.integrations.policy.response_wrappers import normalize_token_response

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MTNTokenProvider:
    def __init__(
        self,
        base_url: str,
        subscription_key: Optional[str],
        api_user: Optional[str],
        api_key: Optional[str],
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = 30.0,
        expiry_skew: timedelta = timedelta(seconds=60),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.subscription_key = subscription_key or ""
        self.api_user = api_user or ""
        self.api_key = api_key or ""
        self.timeout_seconds = timeout_seconds
        self.expiry_skew = expiry_skew
        self._clock = clock
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient()
        self._token: Optional[AccessToken] = None
        self._lock = asyncio.Lock()

    async def get_access_token(self) -> AccessToken:
        async with self._lock:
            token = self._token
            if token is not None and not token.is_expired(self._clock()):
                return token
            self._token = await self._fetch_token()
            return self._token

    def invalidate(self, stale: Optional[AccessToken] = None) -> None:
        """
        Forget the cached token.

        With ``stale`` given, only drop the cache if it still holds that
        token, so a 401 seen on an old token does not throw away a fresh one.
        """
        if stale is None or self._token == stale:
            self._token = None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _check_credentials(self) -> None:
        missing = [
            name
            for name, value in (
                ("MTN_CONSUMER_KEY", self.subscription_key),
                ("MTN_CONSUMER_SECRET", self.api_key),
                ("MTN_API_USER", self.api_user),
            )
            if not value
        ]
        if missing:
            raise AuthError(
                f"Missing MTN API credentials. Check environment variables: {', '.join(missing)}",
                details={"missing": missing},
            )

    async def _fetch_token(self) -> AccessToken:
        self._check_credentials()

        url = f"{self.base_url}/token/"
        headers = {
            "Content-Type": "application/json",
            "Ocp-Apim-Subscription-Key": self.subscription_key,
        }
        try:
            response = await self._client.post(
                url,
                auth=(self.api_user, self.api_key),
                headers=headers,
                timeout=self.timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            logger.error("[MTN] Token request timed out after %ss", self.timeout_seconds)
            raise UpstreamTimeoutError(
                "MTN token endpoint did not respond in time",
                details={"timeout_seconds": self.timeout_seconds},
            ) from exc
        except httpx.RequestError as exc:
            logger.error("[MTN] Token request failed: %s", exc)
            raise UpstreamError(f"Failed to reach MTN token endpoint: {exc}") from exc

        if response.status_code in (401, 403):
            logger.error("[MTN] Token request rejected: %s %s", response.status_code, response.text)
            raise AuthError(
                "MTN API authentication failed. Check your API credentials and subscription key.",
                details={"status_code": response.status_code, "body": response.text},
            )
        if response.status_code >= 400:
            logger.error("[MTN] Token endpoint error: %s %s", response.status_code, response.text)
            raise UpstreamError(
                f"Failed to generate MTN access token (HTTP {response.status_code})",
                details={"status_code": response.status_code, "body": response.text},
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ProtocolError("Invalid token response from MTN API", details={"body": response.text}) from exc

        parsed = normalize_token_response(data)
        lifetime = max(timedelta(seconds=parsed.expires_in) - self.expiry_skew, timedelta(0))
        logger.info("[MTN] Access token generated (expires_in=%ss)", parsed.expires_in)
        return AccessToken(token=parsed.access_token, expires_at=self._clock() + lifetime)

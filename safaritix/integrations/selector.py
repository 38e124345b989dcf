"""
Gateway selection.

The ONE place that decides whether the checkout flow talks to the real MTN
API or to the simulated gateway. It runs once at startup (see
safaritix/api/main.py); the resulting gateway is handed to every consumer
explicitly, never swapped per call.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Optional

import httpx

from safaritix.integrations.clients.mocks.mtn import MTNMockGateway
from safaritix.integrations.clients.mocks.transaction_store import TransactionStore
from safaritix.integrations.clients.real_http.mtn import MTNMomoGateway
from safaritix.integrations.contracts.interfaces import GatewayMode, PaymentGateway
from safaritix.utils.config_loader import GatewaySettings

logger = logging.getLogger(__name__)


def select_payment_gateway(
    settings: GatewaySettings,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
    store: Optional[TransactionStore] = None,
) -> PaymentGateway:
    if settings.mode is GatewayMode.LIVE:
        logger.info("Using LIVE MTN gateway (%s, %s)", settings.environment, settings.resolved_base_url)
        return MTNMomoGateway(
            base_url=settings.resolved_base_url,
            subscription_key=settings.credentials.consumer_key,
            api_user=settings.credentials.api_user,
            api_key=settings.credentials.consumer_secret,
            target_environment=settings.environment,
            callback_url=settings.callback_url,
            http_client=http_client,
            write_timeout_seconds=settings.timeouts.write_seconds,
            read_timeout_seconds=settings.timeouts.read_seconds,
            token_timeout_seconds=settings.timeouts.token_seconds,
        )

    sim = settings.simulation
    logger.warning("⚠️  MTN Mock Mode Enabled - Using simulated responses")
    return MTNMockGateway(
        store=store,
        amount_ceiling=Decimal(str(sim.amount_ceiling)),
        pending_suffix=sim.pending_suffix,
        dwell=timedelta(seconds=sim.dwell_seconds),
        latency=(sim.min_latency_seconds, max(sim.min_latency_seconds, sim.max_latency_seconds)),
    )

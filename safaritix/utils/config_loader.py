"""
Configuration loader for the payment gateway
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from safaritix.integrations.contracts.interfaces import GatewayMode

logger = logging.getLogger(__name__)

MTN_BASE_URLS = {
    "sandbox": "https://sandbox.momodeveloper.mtn.com/collection",
    "production": "https://momodeveloper.mtn.com/collection",
}

_TRUTHY = {"1", "true", "yes", "on"}


class MTNCredentials(BaseModel):
    """Collection product credentials (all required in live mode)"""

    consumer_key: Optional[str] = None      # Ocp-Apim-Subscription-Key
    consumer_secret: Optional[str] = None   # API key, Basic auth password
    api_user: Optional[str] = None          # API user id, Basic auth username


class TimeoutSettings(BaseModel):
    token_seconds: float = Field(default=30.0, gt=0)
    write_seconds: float = Field(default=30.0, gt=0)
    read_seconds: float = Field(default=10.0, gt=0)


class SimulationSettings(BaseModel):
    """Simulated gateway behaviour"""

    amount_ceiling: float = Field(default=1_000_000, gt=0)
    pending_suffix: str = "999"
    dwell_seconds: float = Field(default=5.0, ge=0)
    min_latency_seconds: float = Field(default=0.3, ge=0)
    max_latency_seconds: float = Field(default=1.0, ge=0)


class GatewaySettings(BaseModel):
    mode: GatewayMode = GatewayMode.SIMULATED
    environment: Literal["sandbox", "production"] = "sandbox"
    base_url: Optional[str] = None
    callback_url: Optional[str] = None
    credentials: MTNCredentials = Field(default_factory=MTNCredentials)
    timeouts: TimeoutSettings = Field(default_factory=TimeoutSettings)
    simulation: SimulationSettings = Field(default_factory=SimulationSettings)

    @property
    def resolved_base_url(self) -> str:
        return (self.base_url or MTN_BASE_URLS[self.environment]).rstrip("/")


def load_gateway_settings(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> GatewaySettings:
    """
    Load and validate gateway configuration.

    Values come from the YAML file (if present) and are then overridden by
    environment variables.

    Args:
        config_path: Path to config file. Defaults to config/gateway_config.yml
        environ: Environment mapping. Defaults to os.environ

    Raises:
        ValidationError: If the merged config doesn't match the schema
        ValueError: If PAYMENT_GATEWAY_MODE is set to an unknown value
    """
    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / "config" / "gateway_config.yml"
    env = os.environ if environ is None else environ

    data: Dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    else:
        logger.debug("Gateway config file %s not found; using defaults", config_path)

    _apply_env_overrides(data, env)

    try:
        settings = GatewaySettings(**data)
        logger.info("Loaded gateway config (mode=%s, environment=%s)", settings.mode.value, settings.environment)
        return settings
    except ValidationError as e:
        logger.error("Gateway config validation failed: %s", e)
        raise


def _apply_env_overrides(data: Dict[str, Any], env: Mapping[str, str]) -> None:
    use_mock = env.get("MTN_USE_MOCK")
    if use_mock is not None and use_mock.strip():
        data["mode"] = GatewayMode.SIMULATED.value if use_mock.strip().lower() in _TRUTHY else GatewayMode.LIVE.value

    mode = (env.get("PAYMENT_GATEWAY_MODE") or "").strip().lower()
    if mode in {"live", "real"}:
        data["mode"] = GatewayMode.LIVE.value
    elif mode in {"simulated", "mock", "test"}:
        data["mode"] = GatewayMode.SIMULATED.value
    elif mode:
        logger.error("Unrecognised PAYMENT_GATEWAY_MODE %r; expected live or simulated", mode)
        raise ValueError(
            f"PAYMENT_GATEWAY_MODE must be 'live' or 'simulated' (or real/mock/test); got {mode!r}"
        )

    for env_key, field_name in (("MTN_ENV", "environment"), ("MTN_BASE_URL", "base_url"), ("MTN_CALLBACK_URL", "callback_url")):
        if env.get(env_key):
            data[field_name] = env[env_key].strip()

    credentials = dict(data.get("credentials") or {})
    for env_key, field_name in (
        ("MTN_CONSUMER_KEY", "consumer_key"),
        ("MTN_CONSUMER_SECRET", "consumer_secret"),
        ("MTN_API_USER", "api_user"),
    ):
        if env.get(env_key):
            credentials[field_name] = env[env_key].strip()
    data["credentials"] = credentials

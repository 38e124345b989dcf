"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from safaritix.api.dependencies import api_key_protection
from safaritix.api.endpoints.payments import payments_api
from safaritix.error_handler import ErrorHandler
from safaritix.integrations.contracts.errors import GatewayError
from safaritix.integrations.contracts.interfaces import PaymentGateway
from safaritix.integrations.selector import select_payment_gateway
from safaritix.utils.config_loader import GatewaySettings, load_gateway_settings

# Setup logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

error_handler = ErrorHandler()


def create_app(
    settings: Optional[GatewaySettings] = None,
    gateway: Optional[PaymentGateway] = None,
) -> FastAPI:
    """
    Build the API around ONE payment gateway.

    The gateway is resolved here, once, and every route receives it through
    the get_payment_gateway dependency. Pass ``gateway`` to bypass the
    selector (tests do this).
    """
    settings = settings or load_gateway_settings()
    if gateway is None:
        gateway = select_payment_gateway(settings)

    app = FastAPI(
        title="SafariTix Payments API",
        description="MTN Mobile Money collections for bus ticket checkout",
        version="1.0.0",
        dependencies=[Depends(api_key_protection)],  # protect everything by default
    )
    app.state.settings = settings
    app.state.payment_gateway = gateway

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register payments API router
    app.include_router(payments_api, prefix="/api/v1/payments", tags=["Payments"])

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        status_code, payload = error_handler.handle_exception(exc, context={"path": request.url.path})
        return JSONResponse(status_code=status_code, content={"success": False, **payload})

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {
            "status": "healthy",
            "payment_gateway": {"mode": gateway.mode.value, "environment": settings.environment},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown"""
        logger.info("Shutting down SafariTix Payments API...")
        await gateway.aclose()

    logger.info("SafariTix Payments API ready (gateway mode=%s)", gateway.mode.value)
    return app


app = create_app()

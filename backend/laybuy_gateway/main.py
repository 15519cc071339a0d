"""Laybuy Gateway - Main application entry point."""

import os
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from laybuy_gateway import __version__
from laybuy_gateway.dependencies import get_client, get_manager, get_settings
from laybuy_gateway.routers import audit, checkout, health, price_breakdown, refunds
from laybuy_gateway.shared.middleware import AccessLogMiddleware, CorrelationMiddleware

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger("laybuy")

app = FastAPI(
    title="Laybuy Gateway",
    version=__version__,
    description="Laybuy buy now, pay later payment integration",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Custom middleware (outermost first in execution order)
app.add_middleware(AccessLogMiddleware)
app.add_middleware(CorrelationMiddleware)


@app.on_event("startup")
async def startup():
    settings = get_settings()
    for d in ["store", "audit"]:
        os.makedirs(os.path.join(settings.data_dir, d), exist_ok=True)

    status = get_manager().configuration_status()
    for warning in status.warnings:
        logger.warning(warning)
    for error in status.errors:
        logger.warning(f"Configuration: {error}")
    logger.info(f"Laybuy Gateway started against {settings.service_url}")


@app.on_event("shutdown")
async def shutdown():
    await get_client().aclose()


app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])
app.include_router(refunds.router, prefix="/orders", tags=["Refunds"])
app.include_router(price_breakdown.router, tags=["Price Breakdown"])
app.include_router(health.router, tags=["Health"])
app.include_router(audit.router, prefix="/audit", tags=["Audit"])

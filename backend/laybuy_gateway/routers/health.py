"""Health, configuration status and method capabilities."""

from datetime import datetime

from fastapi import APIRouter, Depends

from laybuy_gateway import __version__
from laybuy_gateway.dependencies import get_manager
from laybuy_gateway.models.api import ConfigurationStatus, PaymentMethodCapabilities
from laybuy_gateway.services.laybuy_manager import LaybuyManager

router = APIRouter()


@router.get("/health")
async def health():
    return {
        "status": "healthy",
        "service": "laybuy-gateway",
        "version": __version__,
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/configuration", response_model=ConfigurationStatus)
async def configuration(manager: LaybuyManager = Depends(get_manager)):
    return manager.configuration_status()


@router.get("/capabilities", response_model=PaymentMethodCapabilities)
async def capabilities(manager: LaybuyManager = Depends(get_manager)):
    return manager.capabilities

"""System-level endpoints."""
from fastapi import APIRouter, Depends

from grokstat import __version__
from grokstat.api.deps import get_registry
from grokstat.config import settings

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/health")
async def system_health(registry=Depends(get_registry)):
    return {
        "status": "healthy",
        "version": __version__,
        "protocols": len(registry),
    }


@router.get("/config")
async def get_config():
    return {
        "query_timeout_sec": settings.query_timeout_sec,
        "max_response_bytes": settings.max_response_bytes,
        "protocols_config_path": str(settings.protocols_config_path or settings.default_protocols_config),
    }

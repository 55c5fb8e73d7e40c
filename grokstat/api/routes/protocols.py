"""Protocol listing endpoints."""
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException

from grokstat.api.deps import get_registry

router = APIRouter(prefix="/api/protocols", tags=["protocols"])


@router.get("", response_model=List[Dict[str, str]])
async def list_protocols(registry=Depends(get_registry)):
    return registry.infos()


@router.get("/{protocol_id}", response_model=Dict[str, str])
async def get_protocol(protocol_id: str, registry=Depends(get_registry)):
    if protocol_id not in registry:
        raise HTTPException(status_code=404, detail=f"Protocol not found: {protocol_id}")
    return dict(registry.get(protocol_id).information)

"""Shared FastAPI dependencies for API routers."""
from functools import lru_cache

from fastapi import Depends, HTTPException

from grokstat.engine.query_executor import QueryExecutor
from grokstat.engine.registry import ProtocolRegistry
from grokstat.exceptions import GrokstatError
from grokstat.protocol_loader import load_registry


@lru_cache(maxsize=1)
def _load_registry() -> ProtocolRegistry:
    return load_registry()


def get_registry() -> ProtocolRegistry:
    try:
        return _load_registry()
    except GrokstatError as exc:
        raise HTTPException(
            status_code=500,
            detail={"kind": exc.kind, "message": exc.message},
        ) from exc


def get_query_executor(registry: ProtocolRegistry = Depends(get_registry)) -> QueryExecutor:
    return QueryExecutor(registry)

"""Server query endpoint."""
import structlog
from fastapi import APIRouter, Depends, HTTPException

from grokstat.api.deps import get_query_executor
from grokstat.exceptions import (
    GrokstatError,
    InvalidAddressError,
    QueryTimeoutError,
    UnknownProtocol,
)
from grokstat.models import QueryRequest, QueryResult

logger = structlog.get_logger()
router = APIRouter(prefix="/api", tags=["query"])


def _status_for(exc: GrokstatError) -> int:
    if isinstance(exc, UnknownProtocol):
        return 404
    if isinstance(exc, InvalidAddressError):
        return 400
    if isinstance(exc, QueryTimeoutError):
        return 504
    return 502


@router.post("/query", response_model=QueryResult, response_model_exclude_none=True)
async def query_server(request: QueryRequest, executor=Depends(get_query_executor)):
    try:
        return await executor.query(request.protocol, request.host)
    except GrokstatError as exc:
        logger.info(
            "api_query_failed",
            protocol=request.protocol,
            host=request.host,
            kind=exc.kind,
            error=exc.message,
        )
        raise HTTPException(
            status_code=_status_for(exc),
            detail={"kind": exc.kind, "message": exc.message},
        )

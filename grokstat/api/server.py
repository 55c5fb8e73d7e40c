"""
FastAPI server for grokstat

Provides REST API for:
- Listing configured protocols
- Querying a single server
- Health and configuration
"""
import structlog
from fastapi import FastAPI

from grokstat import __version__
from grokstat.api.routes import ROUTERS
from grokstat.config import settings
from grokstat.logging import setup_logging

setup_logging("grokstat-api")
logger = structlog.get_logger()

app = FastAPI(
    title="grokstat",
    description="Game server query service",
    version=__version__,
)

for router in ROUTERS:
    app.include_router(router)


@app.get("/")
async def root():
    return {
        "service": "grokstat",
        "version": __version__,
        "status": "operational",
    }


def main() -> None:
    import uvicorn

    logger.info(
        "starting_grokstat_api",
        host=settings.api_host,
        port=settings.api_port,
    )

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()

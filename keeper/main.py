"""
FastAPI application with Atlassian client lifecycle management.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from keeper.config import settings
from keeper.features.cognitive_offboarding.api.router import router as offboarding_router
from keeper.features.cognitive_offboarding.factory import build_gap_scanner, build_orchestrator
from keeper.infrastructure.observability.logging import get_logger, log_request, setup_logging
from keeper.routes import health
from keeper.services.artifact_source import build_artifact_source, build_confluence_client

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the Atlassian clients and workflow on startup; close the clients on shutdown."""
    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    source = None
    confluence = None
    if settings.atlassian_configured():
        source = build_artifact_source()
        confluence = build_confluence_client()
        app.state.orchestrator = build_orchestrator(source, confluence)
        app.state.gap_scanner = build_gap_scanner(source)
        logger.info("Cognitive offboarding workflow initialized")
    else:
        logger.warning("Atlassian credentials not configured; offboarding endpoints disabled")

    yield

    logger.info("Application shutting down")

    shutdown_errors = []
    for name, client in (("artifact_source", source), ("confluence", confluence)):
        if client is None:
            continue
        try:
            await client.close()
        except Exception as e:
            logger.error("Error closing client", client=name, error=str(e))
            shutdown_errors.append(f"{name}: {e}")

    if shutdown_errors:
        logger.warning("Some clients had shutdown errors", errors=shutdown_errors)
    else:
        logger.info("All clients closed successfully")


app = FastAPI(
    title="Tacit Keeper",
    description="Cognitive offboarding: find undocumented knowledge and archive it before it walks out",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(offboarding_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Time each API call and hand it to the access log."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    log_request(request.method, request.url.path, response.status_code, round(process_time, 2))
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

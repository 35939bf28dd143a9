"""
FastAPI application factory for the GoalPulse HTTP adapter.
"""

import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from goalpulse import __version__
from goalpulse.config import get_settings
from goalpulse.routers import evaluation
from goalpulse.utils.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the shared orchestrator up front so a bad goal table fails at startup."""
    settings = get_settings()
    orchestrator = evaluation.get_orchestrator()

    logger.info(
        "application_startup",
        version=app.version,
        dev_mode=settings.dev_mode,
        goals=len(orchestrator.registry),
        horizon_date=settings.forecast_horizon_date.isoformat(),
        recommendation_cache=settings.enable_recommendation_cache,
    )

    yield

    if orchestrator.ranker.cache is not None:
        orchestrator.ranker.cache.clear()
    logger.info("application_shutdown")


async def trace_requests(request: Request, call_next):
    """Bind a request id into the log context and time the request."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, path=request.url.path)

    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(
            "request_failed",
            method=request.method,
            error=str(e),
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error", "request_id": request_id},
            headers={REQUEST_ID_HEADER: request_id},
        )

    response.headers[REQUEST_ID_HEADER] = request_id
    logger.info(
        "request_completed",
        method=request.method,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    return response


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="GoalPulse API",
        description="Goal evaluation and forecasting for a personal progress dashboard",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.middleware("http")(trace_requests)

    @app.get("/health", tags=["System"])
    async def health_check():
        orchestrator = evaluation.get_orchestrator()
        return {
            "status": "healthy",
            "version": app.version,
            "goals": len(orchestrator.registry),
            "default_horizon": settings.forecast_horizon_date.isoformat(),
        }

    app.include_router(evaluation.router, prefix="/api/v1", tags=["Evaluation"])
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "goalpulse.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )

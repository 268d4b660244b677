# src/scoreforge/main.py

"""Main FastAPI application for ScoreForge."""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from scoreforge import config
from scoreforge.api import item, scoreboard
from scoreforge.api.deps import ranking_index
from scoreforge.db.models import Base
from scoreforge.db.session import AsyncSessionLocal, engine
from scoreforge.exceptions import (
    ResourceNotFoundError,
    ScoreForgeError,
    UnauthorizedError,
    ValidationError,
)
from scoreforge.middleware.logging import RequestLoggingMiddleware
from scoreforge.schemas.problem import ProblemDetails
from scoreforge.services.sweeper import TombstoneSweeper

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for startup and shutdown events."""
    config.configure_logging()

    if config.AUTO_CREATE_TABLES:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    sweeper = None
    if config.PURGE_INTERVAL_SECONDS > 0:
        sweeper = TombstoneSweeper(
            AsyncSessionLocal,
            ranking_index,
            retention=timedelta(days=config.TOMBSTONE_RETENTION_DAYS),
            interval_seconds=config.PURGE_INTERVAL_SECONDS,
        )
        sweeper.start()

    yield

    if sweeper is not None:
        await sweeper.stop()
    await engine.dispose()


app = FastAPI(title="ScoreForge API", lifespan=lifespan)

app.add_middleware(RequestLoggingMiddleware)


# =============================================================================
# Problem Details
# =============================================================================


def problem_response(
    request: Request,
    status_code: int,
    detail: str,
    error_type: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render an error as an application/problem+json response."""
    problem = ProblemDetails(
        title=HTTPStatus(status_code).phrase,
        status=status_code,
        detail=detail,
        instance=request.url.path,
        error_type=error_type,
    )
    return JSONResponse(
        status_code=status_code,
        content=problem.model_dump(by_alias=True, exclude_none=True),
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers,
    )


# =============================================================================
# Global Exception Handlers
# =============================================================================


@app.exception_handler(ResourceNotFoundError)
async def resource_not_found_handler(
    request: Request, exc: ResourceNotFoundError
) -> JSONResponse:
    """Handle all resource not found errors -> 404."""
    logger.warning("Resource not found: %s", exc.message, extra=exc.details)
    return problem_response(request, 404, exc.message, type(exc).__name__)


@app.exception_handler(ValidationError)
async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Handle all validation errors -> 400."""
    logger.warning("Validation error: %s", exc.message, extra=exc.details)
    return problem_response(request, 400, exc.message, type(exc).__name__)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed path, query or body values are client errors -> 400."""
    errors = exc.errors()
    detail = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in errors
    )
    logger.warning("Request validation error: %s", detail)
    return problem_response(request, 400, detail, "RequestValidationError")


@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(
    request: Request, exc: UnauthorizedError
) -> JSONResponse:
    """Missing or rejected bearer credential -> 401."""
    logger.warning("Unauthorized: %s", exc.message)
    return problem_response(
        request,
        401,
        exc.message,
        type(exc).__name__,
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(ScoreForgeError)
async def scoreforge_error_handler(
    request: Request, exc: ScoreForgeError
) -> JSONResponse:
    """Catch-all for any other ScoreForge errors (storage, index) -> 500."""
    logger.error("ScoreForge error: %s", exc.message, extra=exc.details, exc_info=True)
    return problem_response(request, 500, exc.message, type(exc).__name__)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Routing errors (unknown path, wrong method) in problem details form."""
    return problem_response(
        request, exc.status_code, str(exc.detail), headers=exc.headers
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Catch-all for database errors that escaped the service layer."""
    logger.error("Database error: %s", exc, exc_info=True)
    return problem_response(request, 500, "An internal database error occurred")


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions."""
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return problem_response(request, 500, "An internal server error occurred")


# Include routers into the main application
app.include_router(scoreboard.router)
app.include_router(item.router)


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for monitoring."""
    return {"status": "healthy"}

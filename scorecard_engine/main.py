from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from scorecard_engine.api.v1.router import router as api_v1_router
from scorecard_engine.config.settings import settings
from scorecard_engine.core.exceptions import (
    BaseAppException,
    ValidationError,
    handle_database_exception,
)
from scorecard_engine.core.logging import configure_logging, get_logger
from scorecard_engine.core.middleware import register_middlewares
from scorecard_engine.db.session import init_db

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.is_production():
        # Development convenience; production schemas are managed separately
        init_db()
    yield


def register_exception_handlers(app: FastAPI) -> None:
    """Render every application error as ``{"error": {...}}`` with its status code."""

    @app.exception_handler(BaseAppException)
    async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        field_errors: dict = {}
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ())) or "request"
            field_errors.setdefault(location, []).append(error.get("msg", "Invalid value"))
        error = ValidationError("Request validation failed", field_errors=field_errors)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error(
            "Unhandled database error",
            extra={"error_type": type(exc).__name__},
            exc_info=True,
        )
        error = handle_database_exception(exc)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app() -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures logging, title, version and debug mode from Settings.
    - Registers core middleware and exception handlers.
    - Includes the versioned API router under /api/v1.
    """
    configure_logging(
        level=settings.LOG_LEVEL,
        log_format=settings.LOG_FORMAT,
        environment=settings.ENVIRONMENT,
        log_file=settings.LOG_FILE,
    )

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
        lifespan=lifespan,
    )

    register_middlewares(app)
    register_exception_handlers(app)

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    return app


app = create_app()

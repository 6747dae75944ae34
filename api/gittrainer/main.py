"""gittrainer API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gittrainer.auth.router import router as auth_router
from gittrainer.auth.service import AuthService
from gittrainer.config import get_settings
from gittrainer.core.context import get_request_id
from gittrainer.core.database import init_async_cassandra, shutdown_async_cassandra
from gittrainer.core.logging import configure_structlog, get_logger
from gittrainer.core.middleware import RequestContextMiddleware
from gittrainer.health import router as health_router
from gittrainer.progress.router import router as progress_router
from gittrainer.progress.service import ProgressService
from gittrainer.tutorials.router import router as tutorials_router
from gittrainer.tutorials.service import TutorialService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


def init_services(app: FastAPI, session) -> None:
    """Build the Cassandra-backed services and expose them on ``app.state``."""
    settings = get_settings()
    keyspace = settings.cassandra_keyspace

    app.state.cassandra_session = session
    app.state.auth_service = AuthService(session=session, keyspace=keyspace)
    app.state.tutorial_service = TutorialService(session=session, keyspace=keyspace)
    app.state.progress_service = ProgressService(
        session=session,
        keyspace=keyspace,
        max_write_attempts=settings.progress_max_write_attempts,
    )
    logger.info("services_initialized", keyspace=keyspace)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        session = await init_async_cassandra()
        init_services(app, session)
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    logger.info("shutting_down_application")
    await shutdown_async_cassandra()


def _get_request_id_safe(request: Request) -> str | None:
    """Get request_id from request state or context."""
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return get_request_id() or None


def _error_body(
    request: Request,
    status_code: int,
    message: str,
    details: object = None,
) -> dict:
    return {
        "error": True,
        "message": message,
        "status_code": status_code,
        "request_id": _get_request_id_safe(request),
        "details": details,
    }


def register_exception_handlers(app: FastAPI) -> None:
    """Global exception handlers. Stack traces are logged, never returned."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        details = None
        if isinstance(exc.detail, dict):
            message = str(exc.detail.get("message", "Request failed"))
            details = {k: v for k, v in exc.detail.items() if k != "message"}
        else:
            message = str(exc.detail)
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            message, details = "Internal server error", None

        return ORJSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.status_code, message, details),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Malformed bodies and parameters are client errors (400)."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(
                request,
                status.HTTP_400_BAD_REQUEST,
                "Validation error",
                [
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in exc.errors()
                ],
            ),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler for unhandled exceptions (persistence failures etc.)."""
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "An unexpected error occurred. Please try again later.",
            ),
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # debug stays False so Starlette never renders stack traces
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Git training platform - API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(tutorials_router)
    app.include_router(progress_router)

    @app.get("/api/test", tags=["health"])
    async def smoke_test() -> dict[str, str]:
        """Basic route to check the server answers."""
        return {"message": "Server is running successfully!"}

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "gittrainer API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()

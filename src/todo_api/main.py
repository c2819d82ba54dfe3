from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import ErrorCode, error_body
from .logging_config import configure_logging
from .repositories import Repository, get_repository
from .routers.todos import build_router
from .service import TodoService
from .settings import Settings, get_settings

logger = structlog.get_logger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "todos", "description": "CRUD operations for Todo items."},
]


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, repository: Optional[Repository] = None) -> FastAPI:
    """
    Build the FastAPI application.

    The repository (data-store client) and the TodoService are created here,
    once per application, and the service is handed to the todos router.
    Pass `repository` to run the app against an already built store.
    """
    settings = settings or get_settings()
    repository = repository or get_repository(settings)
    service = TodoService(repository)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level, settings.log_format)
        await repository.init()
        logger.info("application_started", backend=settings.persistence_backend)
        yield
        logger.info("application_shutting_down")
        await repository.close()

    app = FastAPI(
        title="Todo Backend",
        description="CRUD API for todo items backed by a relational data store.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Malformed request data (e.g. a body that is not valid JSON) is a client error.

        Response format:
            {
                "error": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "detail": [{"field": ..., "message": ..., "type": ...}]
            }
        """
        logger.warning("request_validation_failed", path=request.url.path, errors=exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(
                ErrorCode.VALIDATION_ERROR,
                "Request validation failed",
                [
                    {
                        "field": ".".join(str(loc) for loc in e["loc"]),
                        "message": e["msg"],
                        "type": e["type"],
                    }
                    for e in exc.errors()
                ],
            ),
        )

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all; internal details are logged, never returned."""
        logger.exception("unexpected_error", path=request.url.path, error_type=type(exc).__name__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(ErrorCode.INTERNAL_ERROR, "An unexpected error occurred"),
        )

    @app.get("/", summary="Health Check", tags=["health"])
    async def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health and store reachability.
        """
        reachable = await repository.ping()
        return {
            "message": "Healthy",
            "backend": settings.persistence_backend,
            "store": "ok" if reachable else "unavailable",
        }

    app.include_router(build_router(service))
    return app


app = create_app()

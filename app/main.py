# ============================================================================
# FastAPI Application Entry Point
# ============================================================================
from datetime import datetime, timezone
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging

from app.config import Settings, get_settings
from app.core.context import AppContext
from app.core.database import Base
from app.core.exceptions import APIException, RateLimitExceeded, format_validation_errors
from app.schemas.responses import ErrorResponse, HealthCheckResponse

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, code: str, errors=None, headers=None) -> JSONResponse:
    body = ErrorResponse(message=message, code=code, errors=errors)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {getattr(exc, 'cause', None) or exc.detail}")
        headers = None
        if isinstance(exc, RateLimitExceeded) and exc.retry_after:
            headers = {"Retry-After": str(exc.retry_after)}
        return error_response(exc.status_code, exc.detail, exc.error_code, exc.errors, headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(400, "Validation failed", "VALIDATION_ERROR", format_validation_errors(exc.errors()))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(404, "Route not found", "NOT_FOUND")
        if exc.status_code == 405:
            return error_response(405, "Method not allowed", "METHOD_NOT_ALLOWED")
        return error_response(exc.status_code, str(exc.detail), "HTTP_ERROR")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return error_response(500, "Internal server error", "INTERNAL_ERROR")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application; exits the process when configuration is invalid."""
    if settings is None:
        try:
            settings = get_settings()
        except ValidationError as e:
            missing = ", ".join(str(err["loc"][0]) for err in e.errors())
            logging.basicConfig(level=logging.INFO)
            logger.critical(f"Invalid configuration, check environment variables: {missing}")
            raise SystemExit(1)

    logging.basicConfig(level=settings.LOG_LEVEL)
    context = AppContext.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan - startup and shutdown"""
        logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")
        await context.startup()
        logger.info("Application started successfully")

        yield

        logger.info("Shutting down...")
        await context.shutdown()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Exam preparation platform: curriculum, question bank and quizzes",
        version="1.0.0",
        lifespan=lifespan,
        debug=settings.DEBUG
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/health", response_model=HealthCheckResponse)
    async def health_check():
        return HealthCheckResponse(
            status="ok",
            timestamp=datetime.now(timezone.utc),
            uptime=context.uptime,
            environment=settings.ENVIRONMENT,
            models=sorted(mapper.class_.__name__ for mapper in Base.registry.mappers),
        )

    # imported late so that route modules load after logging is configured
    from app.api.v1.router import api_router
    app.include_router(api_router, prefix=settings.API_PREFIX)
    logger.info(f"API router mounted at {settings.API_PREFIX}")

    return app


app = create_app()

"""FastAPI application entry point."""

import logging
import time
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from user_service.api import users
from user_service.api.errors import error_response, register_exception_handlers
from user_service.config import Settings, get_settings
from user_service.database import build_engine, build_session_factory, init_db
from user_service.errors import InternalError
from user_service.logging_config import configure_logging, request_id_var
from user_service.schemas.envelope import SuccessEnvelope
from user_service.services.security import PasswordHasher

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    settings: Settings = app.state.settings
    if settings.auto_migrate:
        logger.info("Auto-migrating database tables")
        init_db(app.state.engine)
    logger.info(f"User service started ({settings.environment})")
    yield
    app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application and its collaborators from settings."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_json)

    app = FastAPI(
        title="User Service API",
        description="Account registration, login and profile lookup",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.password_hasher = PasswordHasher(settings.bcrypt_rounds)

    # CORS middleware for development
    if settings.is_development:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        reset_token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(f"Unhandled error on {request.method} {request.url.path}")
                response = error_response(InternalError())
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms"
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(reset_token)

    register_exception_handlers(app)

    # Register routers
    app.include_router(users.router)

    @app.get("/health", response_model=SuccessEnvelope[dict[str, str]])
    @app.get("/api/v1/health", response_model=SuccessEnvelope[dict[str, str]])
    async def health_check():
        """Health check endpoint."""
        return SuccessEnvelope(data={"status": "ok", "environment": settings.environment})

    return app


def run() -> None:
    """Serve the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "user_service.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()

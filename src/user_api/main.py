"""Main FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from user_api.config import Settings, get_settings
from user_api.middleware import setup_middleware
from user_api.routes import api_router

# Initialize settings
settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as ``{"message": ...}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed requests (bad JSON, missing fields, non-integer query values) as 400s."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "; ".join(messages) or "Invalid request."},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Application settings; loaded from the environment when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Handle application lifespan events."""
        # Startup
        logger.info("%s v%s started", settings.app_name, settings.app_version)
        logger.info("Environment: %s", settings.environment)
        logger.info("Log level: %s", settings.log_level)
        logger.info("Users file: %s", settings.users_file)
        logger.info("Auth configured: %s", bool(settings.api_token))

        yield

        # Shutdown
        logger.info("%s shutting down", settings.app_name)

    # Swagger UI only in development
    docs_enabled = settings.is_development

    app = FastAPI(
        title=settings.app_name,
        description="User Management API - CRUD over a JSON file store",
        version=settings.app_version,
        lifespan=lifespan,
        redirect_slashes=False,
        docs_url="/swagger" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/swagger/v1/swagger.json" if docs_enabled else None,
    )

    # Request pipeline: CORS -> error handling -> auth -> audit logging
    setup_middleware(app, settings)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Include routers
    app.include_router(api_router)

    return app


# Create FastAPI application
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "user_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )

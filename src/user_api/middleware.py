"""Middleware setup for the FastAPI application.

The request pipeline, outermost first:

1. CORS
2. Error handling (assigns the trace id, turns escaping exceptions into 500s)
3. Bearer token authentication
4. Audit logging
"""

import hmac
import logging
import time
import uuid

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from user_api.config import DEVELOPMENT_ENVIRONMENTS, Settings

logger = logging.getLogger(__name__)

TRACE_ID_HEADER = "X-Request-Id"
BEARER_PREFIX = "bearer "


def get_trace_id(request: Request) -> str:
    """Get the trace identifier assigned to the request."""
    return getattr(request.state, "trace_id", "")


def get_allowed_origins(cors_origins: list[str] | None = None, environment: str = "development") -> list[str]:
    """Get list of allowed CORS origins based on configuration.

    Args:
        cors_origins: Explicitly configured origins
        environment: Environment name (development, production, etc.)

    Returns:
        List of allowed origin URLs
    """
    allowed_origins = [origin.rstrip("/") for origin in cors_origins or []]

    if environment.lower() in DEVELOPMENT_ENVIRONMENTS:
        allowed_origins.extend(
            [
                "http://localhost:5173",
                "http://127.0.0.1:5173",
                "http://localhost:3000",
                "http://127.0.0.1:3000",
            ]
        )

    # Deduplicate while preserving order
    return list(dict.fromkeys(allowed_origins))


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catches unhandled exceptions and returns a consistent JSON error with trace id."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = request.headers.get(TRACE_ID_HEADER) or uuid.uuid4().hex
        request.state.trace_id = trace_id

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled exception trace=%s path=%s", trace_id, request.url.path)
            response = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal server error.",
                    "traceId": trace_id,
                    "path": request.url.path,
                },
            )

        response.headers[TRACE_ID_HEADER] = trace_id
        return response


class ApiTokenAuthMiddleware(BaseHTTPMiddleware):
    """Enforces a bearer token for incoming requests and returns 401 for invalid tokens."""

    def __init__(self, app, api_token: str | None = None) -> None:
        super().__init__(app)
        self.api_token = api_token

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # Swagger and health stay reachable without a token
        path = request.url.path
        if path.startswith("/swagger") or path.lower() == "/health":
            return await call_next(request)

        if not self.api_token or not self.api_token.strip():
            logger.warning("Auth token not configured; denying request to %s", path)
            return self._unauthorized()

        header = request.headers.get("Authorization")
        if header is None or not header.lower().startswith(BEARER_PREFIX):
            return self._unauthorized()

        token = header[len(BEARER_PREFIX) :].strip()
        if not hmac.compare_digest(token.encode(), self.api_token.encode()):
            return self._unauthorized()

        return await call_next(request)

    @staticmethod
    def _unauthorized() -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": "Unauthorized."},
            headers={"WWW-Authenticate": "Bearer"},
        )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs incoming requests and outgoing responses with status and duration for auditing."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        method = request.method
        path = request.url.path
        query = f"?{request.url.query}" if request.url.query else ""
        trace_id = get_trace_id(request)

        logger.info("Request start %s %s%s trace=%s", method, path, query, trace_id)

        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ms = int((time.perf_counter() - start) * 1000)
            logger.info(
                "Request end %s %s%s trace=%s status=%s duration_ms=%s",
                method,
                path,
                query,
                trace_id,
                status_code,
                duration_ms,
            )


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Setup the request pipeline for the FastAPI application.

    Args:
        app: FastAPI application instance
        settings: Application settings (CORS origins, environment, API token)
    """
    allowed_origins = get_allowed_origins(settings.cors_origins, settings.environment)

    # Outermost first
    pipeline = [
        (
            CORSMiddleware,
            {
                "allow_origins": allowed_origins,
                "allow_credentials": True,
                "allow_methods": ["*"],
                "allow_headers": ["*"],
                "expose_headers": [TRACE_ID_HEADER, "Location"],
            },
        ),
        (ErrorHandlingMiddleware, {}),
        (ApiTokenAuthMiddleware, {"api_token": settings.api_token}),
        (RequestLoggingMiddleware, {}),
    ]

    # Starlette wraps the most recently added middleware around the others
    for middleware_class, options in reversed(pipeline):
        app.add_middleware(middleware_class, **options)

    logger.info("CORS enabled for origins: %s (environment=%s)", allowed_origins, settings.environment)
    if not settings.api_token:
        logger.warning("API_TOKEN is not set; all protected endpoints will return 401")

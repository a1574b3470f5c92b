"""
Tabledash - Main Application.

FastAPI application exposing the configuration-driven browse surface, the
secret-key authorized data endpoints and the thin proxy endpoints.
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager
from uuid import UUID, uuid4

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tabledash import __version__
from tabledash.auth import SECRET_KEY_HEADER
from tabledash.config import get_settings
from tabledash.deps import get_dashboard_config
from tabledash.exceptions import TabledashException
from tabledash.schemas import HealthResponse

# Import routers
from tabledash.api.routes.auth import router as auth_router
from tabledash.api.routes.query import router as query_router
from tabledash.api.routes.vod import router as vod_router
from tabledash.modules.dashboard.router import router as dashboard_router
from tabledash.modules.data.router import router as data_router

# Configure standard logging
logging.basicConfig(
    level=get_settings().app_log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("tabledash")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": f"Content-Type, Authorization, {SECRET_KEY_HEADER}",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    config = get_dashboard_config()
    logger.info(
        f"Starting Tabledash API v{__version__} "
        f"[env={settings.app_env}] "
        f"[tables={config.table_names()}]"
    )
    yield
    logger.info("Shutting down Tabledash API")


# Create FastAPI application
app = FastAPI(
    title="Tabledash API",
    description="Configuration-driven browse and admin API over a Supabase project.",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# =============================================================================
# Middleware
# =============================================================================


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.info(f"[{request_id}] {request.method} {request.url.path}")

    response = await call_next(request)

    logger.info(f"[{request_id}] {request.method} {request.url.path} -> {response.status_code}")

    return response


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to all requests."""
    request_id = request.headers.get("X-Request-ID") or str(uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response


@app.middleware("http")
async def cors(request: Request, call_next):
    """Permissive CORS on every response; preflight answered with an empty 200."""
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)

    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


# =============================================================================
# Exception Handlers
# =============================================================================


def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: dict | None = None,
) -> JSONResponse:
    request_id_str = getattr(request.state, "request_id", None)
    request_id = None
    if request_id_str:
        try:
            request_id = UUID(request_id_str)
        except (ValueError, TypeError):
            pass

    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details,
                "request_id": str(request_id) if request_id else None,
            }
        },
    )


@app.exception_handler(TabledashException)
async def tabledash_exception_handler(request: Request, exc: TabledashException):
    """Handle Tabledash custom exceptions."""
    logger.warning(f"TabledashException: {exc.code} - {exc.message}")
    return _error_response(request, exc.status_code, exc.code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and parameters are client errors (400)."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return _error_response(request, 400, "VALIDATION_ERROR", "Invalid request", {"errors": errors})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Routing errors (404, 405) in the standard error envelope."""
    code = "METHOD_NOT_ALLOWED" if exc.status_code == 405 else "HTTP_ERROR"
    if exc.status_code == 404:
        code = "NOT_FOUND"
    return _error_response(request, exc.status_code, code, str(exc.detail))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    # Log the full traceback
    logger.error(f"Unhandled exception on {request.url.path}")
    logger.error(f"Exception type: {type(exc).__name__}")
    logger.error(f"Exception message: {str(exc)}")
    logger.error(f"Traceback:\n{traceback.format_exc()}")

    message = str(exc) if get_settings().app_debug else "An unexpected error occurred"
    response = _error_response(request, 500, "INTERNAL_ERROR", message)
    response.headers.update(CORS_HEADERS)
    return response


# =============================================================================
# Health Check
# =============================================================================


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        version=__version__,
        app_env=settings.app_env,
        is_production=settings.is_production,
        supabase_configured=bool(settings.supabase.url and settings.supabase.publishable_key),
        vod_configured=settings.vod.is_configured,
    )


# =============================================================================
# Register Routers
# =============================================================================

app.include_router(auth_router)
app.include_router(data_router)
app.include_router(dashboard_router)
app.include_router(query_router)
app.include_router(vod_router)


# =============================================================================
# Root Endpoint
# =============================================================================


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint redirect to docs."""
    return {"message": "Welcome to Tabledash API", "docs": "/docs"}

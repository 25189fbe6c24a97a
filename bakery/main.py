"""
FastAPI application entry point.
Main application factory with middleware, exception handlers and route configuration.
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import logging
import time

from bakery.config import Settings, settings as default_settings
from bakery.routes import admin, contact, gallery, orders
from bakery.services.upload_service import ensure_upload_dir
from bakery.storage.analytics import ROUTE_NOT_FOUND, SERVER_ERROR
from bakery.storage.container import Storage, build_storage
from bakery.tasks import start_sweeps, stop_sweeps
from bakery.utils.rate_limit import (
    configure_rate_limits,
    get_client_identifier,
    limiter,
    rate_limit_exceeded_handler,
)
from bakery.utils.static_files import UploadStaticFiles

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def add_cors_headers(response: JSONResponse, request: Request) -> JSONResponse:
    """
    Add CORS headers to error responses.
    Responses built by the outermost error handler bypass CORSMiddleware.

    Args:
        response: The JSONResponse to add headers to
        request: The incoming request

    Returns:
        JSONResponse with CORS headers added
    """
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "*"

    return response


def create_app(app_settings: Optional[Settings] = None, storage: Optional[Storage] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        app_settings: Settings to use (defaults to the environment-loaded settings)
        storage: Pre-built storage services (defaults to build_storage(app_settings))

    Returns:
        FastAPI: Configured application
    """
    app_settings = app_settings or default_settings
    storage = storage or build_storage(app_settings)

    app = FastAPI(
        title=app_settings.API_TITLE,
        description=app_settings.API_DESCRIPTION,
        version=app_settings.API_VERSION,
    )
    app.state.settings = app_settings
    app.state.storage = storage
    app.state.started_at = time.monotonic()
    app.state.sweep_tasks = []
    app.state.limiter = limiter
    configure_rate_limits(app_settings)

    # CORS Middleware Configuration
    allow_all = "*" in app_settings.CORS_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else app_settings.CORS_ORIGINS,
        allow_credentials=not allow_all,  # Must be False when using wildcard origin
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=3600,  # Cache preflight requests for 1 hour
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log incoming requests and their response status."""
        method = request.method
        path = request.url.path
        logger.debug(f"Incoming {method} request to {path} from {get_client_identifier(request)}")

        response = await call_next(request)
        logger.info(f"Response status: {response.status_code} for {method} {path}")
        return response

    # Include routers
    app.include_router(gallery.router, prefix="/api", tags=["gallery"])
    app.include_router(admin.router, prefix="/api")
    app.include_router(orders.router, prefix="/api")
    app.include_router(contact.router, prefix="/api", tags=["contact"])

    # Uploaded files, served only while a record references them
    app.mount(
        app_settings.UPLOAD_URL_PREFIX,
        UploadStaticFiles(
            directory=str(app_settings.UPLOAD_DIR),
            check_dir=False,
            is_served=lambda name: storage.gallery.has_filename(name) or storage.orders.has_reference_image(name),
        ),
        name="uploads",
    )

    # Exception Handlers
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions (401, 403, 404, etc.) with a structured body."""
        logger.warning(
            f"HTTPException on {request.method} {request.url.path}: "
            f"status={exc.status_code}, detail={exc.detail}"
        )

        # Handle both string and dict detail formats
        if isinstance(exc.detail, dict):
            content = exc.detail
        else:
            content = {"success": False, "error": exc.detail, "message": str(exc.detail)}
            if exc.status_code == status.HTTP_404_NOT_FOUND:
                # Unmatched route or unknown static file
                content["message"] = "Route not found"
                storage.analytics.track_event(ROUTE_NOT_FOUND, {
                    "path": request.url.path,
                    "method": request.method,
                    "ip": get_client_identifier(request),
                })

        response = JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None)
        )
        return add_cors_headers(response, request)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        logger.warning(
            f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
        )
        response = JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "error": "Validation error",
                "message": "Request data is invalid",
                "detail": jsonable_errors(exc),
            }
        )
        return add_cors_headers(response, request)

    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions without leaking internals."""
        ip = get_client_identifier(request)
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path} from {ip}: "
            f"{type(exc).__name__}: {str(exc)}",
            exc_info=exc
        )
        storage.analytics.track_event(SERVER_ERROR, {
            "path": request.url.path,
            "method": request.method,
            "ip": ip,
            "error": type(exc).__name__,
        })
        response = JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": "Internal server error",
                "message": "An unexpected error occurred"
            }
        )
        return add_cors_headers(response, request)

    # Root Endpoints
    @app.get("/")
    async def root():
        """Root endpoint - API health check."""
        return {
            "status": "OK",
            "message": app_settings.API_TITLE,
            "version": app_settings.API_VERSION,
            "images": len(storage.gallery),
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "uptime": round(time.monotonic() - app.state.started_at, 3),
            "images": len(storage.gallery),
            "orders": len(storage.orders),
            "activeSessions": len(storage.sessions),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.on_event("startup")
    async def startup_event():
        """Prepare the upload directory and start the periodic sweeps."""
        try:
            ensure_upload_dir(Path(app_settings.UPLOAD_DIR))
        except OSError:
            # Uploads will fail with 500 until the directory can be created
            logger.error("Upload directory unavailable; uploads and static files will fail")
        app.state.sweep_tasks = start_sweeps(storage, app_settings.SWEEP_INTERVAL_MINUTES * 60)

    @app.on_event("shutdown")
    async def shutdown_event():
        """Stop the sweeps and flush the snapshot one last time."""
        await stop_sweeps(app.state.sweep_tasks)
        app.state.sweep_tasks = []
        if storage.store.save():
            logger.info("Snapshot flushed on shutdown")

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors reduced to JSON-safe location/message pairs."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("bakery.main:app", host="0.0.0.0", port=8000)

"""
Salon API — FastAPI Application Factory
========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn salon_api.main:app) or `salon-api` / `python -m salon_api`.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌────────────┐  │
    │  │ Req ID   │→│ Logging  │→│ GZip │→│ CORS       │  │
    │  └──────────┘ └──────────┘ └──────┘ └────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌───────────────┐ ┌───────────────┐ ┌───────────┐  │
    │  │ /api/bookings │ │ /api/products │ │ /health   │  │
    │  └───────────────┘ └───────────────┘ └───────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Conflict→409 │   │
    │  │ Media/DB/unexpected→500                      │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (MONGODB_URI missing → startup fails)
    3. Open the MongoDB client and ping it (unreachable → startup fails)
    Shutdown:
    1. Close the MongoDB client
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from salon_api import __version__
from salon_api.config import settings
from salon_api.database import MongoDatabase
from salon_api.exceptions import (
    ConflictError,
    DatabaseError,
    MediaStorageError,
    NotFoundError,
    SalonError,
    ValidationError,
)
from salon_api.middleware.logging import RequestLoggingMiddleware
from salon_api.middleware.request_id import RequestIDMiddleware, request_id_var
from salon_api.routes import bookings, health, products

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # These log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Opens the MongoDB client on startup and closes it on shutdown.

    Unlike a missing media host key, a missing or unreachable database is
    fatal: the exception propagates and uvicorn exits.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Salon API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise

    if not settings.media_configured:
        logger.warning("CLOUDINARY_* settings are incomplete; product image uploads will fail")

    mongo = MongoDatabase(
        settings.mongodb_uri,
        settings.mongodb_db_name,
        timeout_ms=settings.mongodb_timeout_ms,
    )
    try:
        await mongo.connect()
    except DatabaseError as e:
        logger.error("MongoDB connection error: %s | Context: %s", e.message, e.context)
        raise
    app.state.mongo = mongo

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Salon API shutting down...")
    await mongo.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps exception types to HTTP status codes and response bodies.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400
        NotFoundError (incl. InvalidIdError)     → 404
        ConflictError                            → 409
        MediaStorageError                        → 500
        DatabaseError / SalonError               → 500
        Exception (fallback)                     → 500 with the error text

    Stack traces are logged server-side only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={"message": exc.message, "details": exc.context, "request_id": rid},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Missing or ill-typed body/form fields. FastAPI would answer 422."""
        rid = request_id_var.get("")
        problems = []
        fields = []
        for err in exc.errors():
            name = ".".join(str(part) for part in err.get("loc", ())[1:]) or "body"
            fields.append(name)
            problems.append(f"{name}: {err.get('msg', 'invalid')}")
        message = "Invalid request: " + "; ".join(problems)
        logger.warning("[%s] %s", rid, message)
        return JSONResponse(
            status_code=400,
            content={"message": message, "details": {"fields": fields}, "request_id": rid},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={"message": exc.message, "request_id": rid},
        )

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        rid = request_id_var.get("")
        logger.warning("[%s] Conflict: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=409,
            content={"message": exc.message, "request_id": rid},
        )

    @app.exception_handler(MediaStorageError)
    async def handle_media_error(request: Request, exc: MediaStorageError):
        rid = request_id_var.get("")
        logger.error("[%s] Media host error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={"message": exc.message, "request_id": rid},
        )

    @app.exception_handler(SalonError)
    async def handle_salon_error(request: Request, exc: SalonError):
        """DatabaseError and any other application error without its own handler."""
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s",
                     rid, type(exc).__name__, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={"message": exc.message, "request_id": rid},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": "Something went wrong!", "error": str(exc), "request_id": rid},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance. The database is opened by the
    lifespan, so creating an app has no side effects (tests build their own).
    """
    app = FastAPI(
        title="Salon API",
        description="Appointment bookings and a product catalog with hosted product images.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_origins_list != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(bookings.router)
    app.include_router(products.router)
    app.include_router(health.router)

    # Mounted last so API routes take precedence
    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
        logger.info("Serving static files from %s", static_dir.resolve())

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn on the configured port."""
    import uvicorn

    uvicorn.run("salon_api.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()

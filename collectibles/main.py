"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version as get_version

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from collectibles.auth.router import router as auth_router
from collectibles.catalog.router import router as catalog_router
from collectibles.catalog.store import CollectionStore
from collectibles.config.settings import get_settings
from collectibles.core.exceptions import APIError
from collectibles.core.logging import setup_logging
from collectibles.core.middleware import (
    CorrelationIdMiddleware,
    RequestLoggingMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
    correlation_id_var,
)
from collectibles.db.session import get_engine, get_session_factory
from collectibles.health.router import router as health_router
from collectibles.hero.router import router as hero_router
from collectibles.images.client import CloudflareImagesClient
from collectibles.images.router import router as images_router
from collectibles.images.service import ImageService
from collectibles.reports.router import router as reports_router

logger = logging.getLogger(__name__)


def get_app_version() -> str:
    """Get application version from package metadata."""
    try:
        return get_version("collectibles-catalog")
    except PackageNotFoundError:
        return "0.0.0-dev"


OPENAPI_TAGS = [
    {"name": "health", "description": "Liveness and readiness probes"},
    {"name": "auth", "description": "Accounts and session tokens"},
    {"name": "categories", "description": "Category tree (writes require a session)"},
    {"name": "items", "description": "Collectible items (writes require a session)"},
    {"name": "collection", "description": "Collection cache maintenance"},
    {"name": "manufacturers", "description": "Manufacturer names seen on items"},
    {"name": "reports", "description": "Valuation reports over the collection"},
    {"name": "images", "description": "Image uploads and deletes"},
    {"name": "hero", "description": "Home page hero text"},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the collection store on startup and tear it down on shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Application starting up")

    session_factory = get_session_factory()
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        logger.info("Database connectivity verified")
    except Exception as e:
        logger.error("Database connectivity check failed: %s", e)
        raise RuntimeError("Cannot connect to database") from e

    if settings.missing_image_credentials:
        logger.warning(
            "Image service not configured; uploads will fail",
            extra={"missing": settings.missing_image_credentials},
        )
    image_client = CloudflareImagesClient(settings)
    image_service = ImageService(
        image_client,
        max_item_images=settings.max_item_images,
        max_category_images=settings.max_category_images,
    )
    store = CollectionStore(session_factory, image_service)
    if not await store.load():
        logger.warning(
            "Collection cache incomplete at startup; "
            "POST /api/v1/collection/reload to retry"
        )

    app.state.image_service = image_service
    app.state.collection_store = store

    yield

    logger.info("Application shutting down")
    store.clear()
    await image_client.aclose()
    try:
        await get_engine().dispose()
        logger.info("Database engine disposed successfully")
    except Exception as e:
        logger.error("Error disposing database engine: %s", e)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors with correlation ID for debugging."""
    correlation_id = correlation_id_var.get()
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "error": type(exc).__name__,
            "correlation_id": correlation_id,
            **exc.details,
        },
        headers={"X-Correlation-ID": correlation_id} if correlation_id else None,
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    correlation_id = correlation_id_var.get()
    # ctx may hold exception instances, which are not JSON serializable
    errors = [
        {
            "type": error.get("type"),
            "loc": error.get("loc"),
            "msg": error.get("msg"),
            "input": error.get("input"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "detail": errors,
            "error": "ValidationError",
            "correlation_id": correlation_id,
        },
        headers={"X-Correlation-ID": correlation_id} if correlation_id else None,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    correlation_id = correlation_id_var.get()
    logger.exception("Unhandled exception", extra={"path": request.url.path})
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": "InternalServerError",
            "correlation_id": correlation_id,
        },
        headers={"X-Correlation-ID": correlation_id} if correlation_id else None,
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # OpenAPI docs only in debug mode
    docs_url = "/docs" if settings.debug else None
    redoc_url = "/redoc" if settings.debug else None
    openapi_url = "/openapi.json" if settings.debug else None

    app = FastAPI(
        title=settings.app_name,
        version=get_app_version(),
        debug=settings.debug,
        lifespan=lifespan,
        docs_url=docs_url,
        redoc_url=redoc_url,
        openapi_url=openapi_url,
        openapi_tags=OPENAPI_TAGS,
    )

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type", "X-Correlation-ID"],
            expose_headers=["X-Correlation-ID", "X-Process-Time"],
        )

    # Order matters: last added is outermost
    app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.max_request_size)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RequestLoggingMiddleware, expose_timing=settings.expose_timing_header
    )
    app.add_middleware(CorrelationIdMiddleware)

    app.add_exception_handler(APIError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError,
        validation_error_handler,  # pyright: ignore[reportArgumentType]
    )
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(health_router)
    app.include_router(auth_router)
    for router in (catalog_router, reports_router, images_router, hero_router):
        app.include_router(router, prefix="/api/v1")

    return app


app = create_app()


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    settings = get_settings()
    if settings.debug:
        return {"message": "Collectibles catalog API. Visit /docs for documentation."}
    return {"message": "Collectibles catalog API."}


def main() -> None:
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "collectibles.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()

"""FastAPI application factory and lifespan management."""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.middleware import RequestLoggingMiddleware
from src.api.routes import files, health
from src.core.config import settings
from src.core.exceptions import (
    FileStoreError,
    ObjectNotFoundError,
    StorageInitError,
    UploadTooLargeError,
    ValidationError,
)
from src.core.logging import get_logger, setup_logging
from src.storage.local import LocalStorage

logger = get_logger(__name__)

# Most specific first
ERROR_STATUS_CODES: list[tuple[type[FileStoreError], int]] = [
    (UploadTooLargeError, 413),
    (ValidationError, 400),
    (ObjectNotFoundError, 404),
]


def status_code_for(exc: FileStoreError) -> int:
    """Map a domain exception to an HTTP status code."""
    for exc_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown."""
    # Startup
    setup_logging()
    logger.info(
        "Starting file store",
        version=settings.app_version,
        environment=settings.environment.value,
    )

    store = getattr(app.state, "file_store", None)
    if store is None:
        store = LocalStorage(settings.storage_path)
        app.state.file_store = store

    try:
        await store.init()
    except StorageInitError as e:
        logger.error("Failed to initialize storage", error=e.message, **e.details)
        raise

    logger.info("Storage initialized", path=str(store.base_path))
    app.state.ready = True

    yield

    # Shutdown
    logger.info("Shutting down file store")
    app.state.ready = False


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Local file storage API with JSON metadata sidecars",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.add_middleware(RequestLoggingMiddleware)

    # Exception handlers
    @app.exception_handler(FileStoreError)
    async def file_store_error_handler(
        request: Request, exc: FileStoreError
    ) -> JSONResponse:
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.error("Application error", error=exc.message, details=exc.details)
        return JSONResponse(
            status_code=status_code,
            content={
                "success": False,
                "error": exc.message,
                "details": exc.details,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Malformed request",
                "details": {"errors": jsonable_encoder(exc.errors())},
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    # Include routers
    app.include_router(health.router, prefix=settings.api_prefix, tags=["Health"])
    app.include_router(
        files.router,
        prefix=f"{settings.api_prefix}/storage",
        tags=["Storage"],
    )

    return app


# Application instance
app = create_app()


def run() -> None:
    """Run the application with uvicorn."""
    uvicorn.run(
        "src.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()

"""
FastAPI application factory and main app configuration.
"""

import logging
from contextlib import asynccontextmanager

from azure.core.exceptions import HttpResponseError
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .adapters.storage.azure_blob_service import get_azure_blob_service
from .api.errors import APIError
from .api.routers import blob, cosmos, health
from .api.utils.responses import fail
from .core.config import get_settings
from .core.structured_logger import configure_logging
from .middleware.performance_middleware import PerformanceMiddleware
from .middleware.request_id_middleware import RequestIDMiddleware

logger = logging.getLogger("blobstorageapi")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.app_env}")

    if settings.azure_blob.auto_create_container and settings.azure_blob.is_configured:
        try:
            await get_azure_blob_service().ensure_container_exists()
            logger.info(f"Default container '{settings.azure_blob.container_name}' is ready")
        except Exception as e:
            logger.error(f"Could not ensure default container exists: {e}", exc_info=True)
    elif not settings.azure_blob.is_configured:
        logger.warning("Azure Blob Storage is not configured; blob routes will fail until it is")

    yield

    logger.info(f"Shutting down {settings.app_name}")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()
    configure_logging(settings.logging)

    app = FastAPI(
        title=settings.app_name,
        description="HTTP front end for Azure Blob Storage and Azure Cosmos DB",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    allow_methods = list({m.upper() for m in settings.cors.allowed_methods} | {"OPTIONS"})
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=False,
        allow_methods=allow_methods,
        allow_headers=settings.cors.allowed_headers,
        max_age=600,
    )
    app.add_middleware(PerformanceMiddleware)
    # Registered last so it runs first and the id is set for everything below
    app.add_middleware(RequestIDMiddleware)

    app.include_router(health.router)
    app.include_router(blob.router)
    app.include_router(cosmos.router)

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        req_id = getattr(request.state, "request_id", None)
        logger.error(f"APIError: {exc.code} ({exc.http_status}) {exc.message} | request_id={req_id}")
        return JSONResponse(
            status_code=exc.http_status,
            content=fail(request, error=exc.code, message=exc.message, details=exc.details).dict(),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        req_id = getattr(request.state, "request_id", None)
        error_details = exc.errors()
        logger.error(f"ValidationError on {request.method} {request.url.path}: {error_details} | request_id={req_id}")

        error_messages = []
        for error in error_details:
            loc = " -> ".join(str(x) for x in error.get("loc", []))
            msg = error.get("msg", "Validation error")
            error_messages.append(f"{loc}: {msg}")

        return JSONResponse(
            status_code=400,
            content=fail(
                request,
                error="INVALID_INPUT",
                message=f"Input validation failed: {'; '.join(error_messages)}",
                details={"errors": [str(error) for error in error_details], "path": request.url.path},
            ).dict(),
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        req_id = getattr(request.state, "request_id", None)
        logger.error(f"Unhandled error: {type(exc).__name__}: {exc} | request_id={req_id}", exc_info=exc)

        details = {}
        if isinstance(exc, HttpResponseError):
            details = {"status_code": exc.status_code, "error_code": getattr(exc, "error_code", None)}

        return JSONResponse(
            status_code=500,
            content=fail(request, error="INTERNAL_ERROR", message=str(exc), details=details).dict(),
        )

    return app


# Create the app instance
app = create_app()


# Root endpoint
@app.get("/", tags=["health"])
async def root():
    """Root endpoint with API information."""
    settings = get_settings()
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.app_env,
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "health": "/health",
            "upload_blob": "POST /blob/upload",
            "download_blob": "GET /blob/get/{fileName}",
            "list_files": "GET /blob/get/{container}/files",
            "container_properties": "GET /blob/get/{container}/properties",
            "delete_blob": "DELETE /blob/delete/{fileName}",
            "create_directory": "POST /blob/create-directory",
            "create_container": "POST /blob/create-container",
            "get_metadata": "GET /blob/metadata/{blobName}",
            "set_metadata": "POST /blob/metadata/{blobName}",
            "copy_blob": "POST /blob/copy",
            "create_snapshot": "POST /blob/snapshot/{blobName}",
            "create_database": "POST /cosmosdb/createDatabase",
            "delete_database": "DELETE /cosmosdb/deleteDatabase",
            "create_cosmos_container": "POST /cosmosdb/createContainer",
            "create_document": "POST /cosmosdb/createDocument",
            "read_item": "GET /cosmosdb/readItem",
            "create_stored_procedure": "POST /cosmosdb/createStoredProcedure",
            "execute_stored_procedure": "POST /cosmosdb/executeStoredProcedure",
        },
    }

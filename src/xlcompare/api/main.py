"""
FastAPI main application.
xlcompare - REST API for comparing spreadsheet workbooks.
"""
import logging

import openpyxl
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from xlcompare.api.models import HealthResponse, VersionResponse
from xlcompare.api.routes import compare, jobs
from xlcompare.core.config import get_settings

logger = logging.getLogger(__name__)

# Get settings
settings = get_settings()

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="xlcompare - semantic comparison of spreadsheet workbooks",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.LOG_LEVEL == "DEBUG" else None,
        },
    )


# Include routers
app.include_router(
    compare.router,
    prefix=settings.API_V1_PREFIX,
    tags=["compare"],
)

app.include_router(
    jobs.router,
    prefix=settings.API_V1_PREFIX,
    tags=["jobs"],
)


# Root endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(version=settings.APP_VERSION)


@app.get("/version", response_model=VersionResponse)
async def version():
    """Version information endpoint."""
    return VersionResponse(
        app_name=settings.APP_NAME,
        app_version=settings.APP_VERSION,
        openpyxl_version=openpyxl.__version__,
    )


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Upload storage: {settings.TEMP_STORAGE_PATH}")


@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown."""
    logger.info(f"Shutting down {settings.APP_NAME}")


if __name__ == "__main__":
    import uvicorn

    from xlcompare.utils.logging_setup import setup_logging

    setup_logging(settings.LOG_LEVEL, str(settings.LOG_DIR) if settings.LOG_DIR else None, component='xlcompare-api')
    uvicorn.run(
        "xlcompare.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )

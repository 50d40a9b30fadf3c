"""
FastAPI application for the SimpliShare offers API.

To run: uvicorn simplishare.main:app --reload
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from simplishare.api.v1 import api_router
from simplishare.core.config import settings
from simplishare.core.database import Database, get_database
from simplishare.core.responses import error_response, success_response
from simplishare.email_service import EmailService
from simplishare.error_handlers import (
    app_exception_handler,
    validation_exception_handler,
    integrity_error_handler,
    http_exception_handler,
    generic_exception_handler,
)
from simplishare.exceptions import AppException, ErrorCode
from simplishare.logging_config import setup_logging, get_logger
from simplishare.middleware import RequestIdMiddleware
from simplishare.storage import ImageBucket

setup_logging(
    log_level=settings.log_level,
    log_dir=settings.log_dir,
    max_bytes=settings.log_max_bytes,
    backup_count=settings.log_backup_count,
)
logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Builds the process-wide handles (database, image bucket, email service)
    and parks them on ``app.state`` for the request dependencies.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {'Development' if settings.debug else 'Production'}")

    database = Database(
        settings.database_url,
        echo=settings.db_echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )

    # Use Alembic migrations unless DB_AUTO_CREATE is set
    if settings.db_auto_create:
        logger.info("Creating database tables...")
        await database.create_all()

    if not await database.ping():
        logger.warning("Database is not reachable at startup")

    app.state.database = database
    app.state.image_bucket = ImageBucket(database.session_factory, chunk_size=settings.image_chunk_size)
    app.state.email_service = EmailService(settings)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await database.dispose()
    logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="SimpliShare - stores, offers and offer images",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)


# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)


# Exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(IntegrityError, integrity_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


# Include API routers
app.include_router(api_router)


@app.get("/health-check")
async def health_check(request: Request):
    """Report whether the service and its database are up."""
    if not await get_database(request).ping():
        return error_response(
            request,
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Database is unavailable.",
            {"status": "degraded", "database": "unavailable"},
            ErrorCode.DATABASE_CONNECTION,
        )
    return success_response(
        request,
        status.HTTP_200_OK,
        "Server is running.",
        {"status": "healthy", "database": "connected", "version": settings.app_version},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "simplishare.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

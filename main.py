"""
Product Feed Importer — Main Application

FastAPI application entry point. Serves the manual import trigger and
owns the background scheduler for the nightly import.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import structlog
from datetime import datetime

from config import settings, check_connection
from exceptions import AppError


def configure_logging() -> None:
    """JSON logs in production, console renderer elsewhere."""
    logging.basicConfig(format="%(message)s", level=settings.log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.is_production
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()
logger = structlog.get_logger(__name__)

from services.import_scheduler import (  # noqa: E402
    start_import_scheduler,
    shutdown_import_scheduler,
    next_run_time,
)
from services.product_import_service import ProductImportService  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: report store counts, start the nightly import schedule
    Shutdown: stop the schedule
    """
    logger.info(
        "application_starting",
        environment=settings.environment,
        feed=settings.csv_file_path,
        delete_flag=settings.delete_flag
    )

    db_status = check_connection()
    if db_status["status"] == "healthy":
        logger.info(
            "database_connected",
            products=db_status["products_count"],
            vendors=db_status["vendors_count"],
            manufacturers=db_status["manufacturers_count"]
        )
    else:
        # The schedule still starts; each run reports its own failures
        logger.error("database_connection_failed", error=db_status.get("error"))

    start_import_scheduler()

    yield

    shutdown_import_scheduler()
    logger.info("application_shutting_down")


app = FastAPI(
    title="Product Feed Importer",
    description="Imports the supplier product feed into the product catalog",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """Database state plus import run and schedule state."""
    db_status = check_connection()

    return {
        "status": "healthy" if db_status["status"] == "healthy" else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
        "database": db_status,
        "import": {
            "running": ProductImportService.is_running(),
            "next_scheduled_run": next_run_time(),
        }
    }


@app.get("/")
async def root():
    return {
        "name": "Product Feed Importer API",
        "version": "0.1.0",
        "health": "/health",
        "endpoints": {
            "import": "/api/import"
        },
        "schedule": settings.import_cron if settings.import_schedule_enabled else None
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.warning(
        "request_failed",
        path=request.url.path,
        code=exc.code,
        status_code=exc.status_code
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Unhandled exceptions become a 500 in the standard error format."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.utcnow().isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.imports import router as imports_router  # noqa: E402

app.include_router(imports_router, prefix="/api/import", tags=["Import"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )

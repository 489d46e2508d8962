"""
Product import API routes.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from services.product_import_service import get_product_import_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()

IMPORT_ACK = {"message": "Product import triggered successfully."}


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.post("")
def trigger_import():
    """
    Run a full product import and wait for it to finish.

    Per-row failures do not change the response; they are in the logs.

    Raises:
        409: Another import is already running
    """
    try:
        service = get_product_import_service()
        summary = service.import_products(raise_if_running=True)
        logger.info(
            "manual_import_finished",
            status=summary.status.value,
            rows_imported=summary.rows_imported
        )
        return IMPORT_ACK

    except Exception as e:
        return handle_error(e)

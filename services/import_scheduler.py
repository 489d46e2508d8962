"""
Scheduled product import.

Runs the import on a crontab schedule (daily at midnight by default)
in a background thread owned by the FastAPI lifespan.
"""

from typing import Optional
import structlog

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from config import settings
from services.product_import_service import get_product_import_service

logger = structlog.get_logger(__name__)

IMPORT_JOB_ID = "product_import"

_scheduler: Optional[BackgroundScheduler] = None


def run_scheduled_import() -> None:
    """Cron job body; never raises into the scheduler."""
    logger.info("scheduled_import_triggered")
    try:
        summary = get_product_import_service().import_products()
        logger.info("scheduled_import_finished", status=summary.status.value)
    except Exception as e:
        logger.error(
            "scheduled_import_failed",
            error=str(e),
            error_type=type(e).__name__
        )


def start_import_scheduler(cron: Optional[str] = None) -> Optional[BackgroundScheduler]:
    """
    Start the background scheduler with the import job.

    Args:
        cron: Crontab expression (defaults to settings.import_cron)

    Returns:
        The running scheduler, or None if scheduling is disabled
    """
    global _scheduler

    if not settings.import_schedule_enabled:
        logger.info("import_schedule_disabled")
        return None

    if _scheduler is not None and _scheduler.running:
        return _scheduler

    expression = cron or settings.import_cron
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        run_scheduled_import,
        CronTrigger.from_crontab(expression),
        id=IMPORT_JOB_ID,
        max_instances=1,
        coalesce=True,
        replace_existing=True
    )
    scheduler.start()
    _scheduler = scheduler

    logger.info("import_scheduler_started", cron=expression)
    return scheduler


def next_run_time() -> Optional[str]:
    """ISO timestamp of the next scheduled import, if scheduled."""
    if _scheduler is None or not _scheduler.running:
        return None
    job = _scheduler.get_job(IMPORT_JOB_ID)
    if job is None or job.next_run_time is None:
        return None
    return job.next_run_time.isoformat()


def shutdown_import_scheduler() -> None:
    """Stop the scheduler if it is running."""
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info("import_scheduler_stopped")
    _scheduler = None

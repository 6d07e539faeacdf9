"""Scheduler configuration using SQLAlchemy job store."""

from typing import Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, EVENT_JOB_MAX_INSTANCES
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.schedulers.background import BackgroundScheduler

from .config.logging import get_logger
from .config.settings import get_settings

logger = get_logger(__name__)

REVISIT_SCAN_JOB_ID = "revisit_scan"


def create_scheduler(database_url: Optional[str] = None) -> BackgroundScheduler:
    """
    Create and configure a BackgroundScheduler with SQLAlchemy job store.

    Args:
        database_url: Job store URL (defaults to the application database)

    Returns:
        Configured BackgroundScheduler instance
    """
    settings = get_settings()

    # Jobs live in the same database as the application data
    jobstores = {
        "default": SQLAlchemyJobStore(
            url=database_url or settings.get_database_url(),
            tablename="apscheduler_jobs",
        )
    }
    executors = {"default": ThreadPoolExecutor(max_workers=settings.scheduler_max_workers)}
    job_defaults = {
        "coalesce": True,  # A late scan replaces the ones it missed
        "max_instances": 1,  # Never overlap scan ticks
        "misfire_grace_time": 30,
    }

    scheduler = BackgroundScheduler(
        jobstores=jobstores,
        executors=executors,
        job_defaults=job_defaults,
        timezone="UTC",
    )

    scheduler.add_listener(job_executed_listener, EVENT_JOB_EXECUTED)
    scheduler.add_listener(job_error_listener, EVENT_JOB_ERROR)
    scheduler.add_listener(job_skipped_listener, EVENT_JOB_MAX_INSTANCES)

    return scheduler


def job_executed_listener(event):
    """Log successful job executions."""
    logger.debug(
        "Job executed", job_id=event.job_id, scheduled_run_time=str(event.scheduled_run_time)
    )


def job_error_listener(event):
    """Log job execution errors."""
    logger.error(
        "Job crashed",
        job_id=event.job_id,
        error=str(event.exception),
        traceback=event.traceback,
    )


def job_skipped_listener(event):
    """Log ticks dropped because the previous one is still running."""
    logger.warning("Job skipped, previous run still active", job_id=event.job_id)


def get_global_scheduler() -> BackgroundScheduler:
    """
    Get or create the global scheduler instance.

    Returns:
        Global BackgroundScheduler instance
    """
    if not hasattr(get_global_scheduler, "_scheduler"):
        get_global_scheduler._scheduler = create_scheduler()

    return get_global_scheduler._scheduler


def start_scheduler():
    """Start the global scheduler."""
    scheduler = get_global_scheduler()
    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started with SQLAlchemy job store")


def shutdown_scheduler():
    """Shutdown the global scheduler."""
    scheduler = get_global_scheduler()
    if scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler shutdown complete")


def add_revisit_scan_job(interval_minutes: Optional[int] = None):
    """
    Add the periodic revisit scan to the scheduler.

    Args:
        interval_minutes: Minutes between ticks (defaults to ``scan_interval_minutes``)
    """
    interval_minutes = interval_minutes or get_settings().scan_interval_minutes
    scheduler = get_global_scheduler()

    try:
        scheduler.remove_job(REVISIT_SCAN_JOB_ID)
    except JobLookupError:
        pass  # Job doesn't exist, which is fine

    # Referenced by import path so the job store can persist it
    scheduler.add_job(
        func="catalyst_watch.services.scan.jobs:run_revisit_scan_sync",
        trigger="interval",
        minutes=interval_minutes,
        id=REVISIT_SCAN_JOB_ID,
        name="Catalyst Revisit Scan",
        replace_existing=True,
    )

    logger.info("Revisit scan job scheduled", interval_minutes=interval_minutes)


def list_scheduled_jobs():
    """List all currently scheduled jobs."""
    jobs = get_global_scheduler().get_jobs()

    if not jobs:
        print("No scheduled jobs")
        return

    print("Scheduled jobs:")
    for job in jobs:
        print(f"  - {job.id}: {job.name} (next run: {job.next_run_time})")

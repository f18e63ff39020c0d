"""
Application Scheduler - APScheduler Integration

Runs the periodic orphan file sweep on the application's event loop.
"""

import logging

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from jobboard.services.file_sweeper import OrphanFileSweeper

logger = logging.getLogger(__name__)

FILE_SWEEP_JOB_ID = "orphan_file_sweep"


def scheduler_listener(event):
    """
    Listener for scheduler events (executed jobs, errors).

    Args:
        event: APScheduler event object
    """
    if event.exception:
        logger.error(
            f"❌ Job '{event.job_id}' failed with exception: {event.exception}",
            exc_info=event.exception,
        )
    else:
        logger.info(f"✅ Job '{event.job_id}' executed successfully")


def create_scheduler() -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(
        timezone="UTC",
        job_defaults={
            "coalesce": True,  # Combine multiple missed executions into one
            "max_instances": 1,  # Never run two sweeps at once
            "misfire_grace_time": 3600,
        },
    )
    scheduler.add_listener(scheduler_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)
    return scheduler


async def run_file_sweep(sweeper: OrphanFileSweeper) -> dict:
    """Scheduled task: delete orphaned uploads and relocate misplaced ones."""
    report = await sweeper.run()
    return report.to_dict()


def setup_jobs(scheduler: AsyncIOScheduler, sweeper: OrphanFileSweeper, interval_minutes: int) -> None:
    """Register all periodic jobs."""
    scheduler.add_job(
        run_file_sweep,
        IntervalTrigger(minutes=interval_minutes),
        args=[sweeper],
        id=FILE_SWEEP_JOB_ID,
        name=f"Orphan File Sweep (every {interval_minutes} min)",
        replace_existing=True,
    )
    logger.info(f"   ✅ Added: {FILE_SWEEP_JOB_ID} (every {interval_minutes} min)")


def start_scheduler(scheduler: AsyncIOScheduler, sweeper: OrphanFileSweeper, interval_minutes: int) -> None:
    """
    Start the scheduler.

    Called during application startup (in lifespan).
    """
    if scheduler.running:
        logger.warning("⚠️  Scheduler already running")
        return

    setup_jobs(scheduler, sweeper, interval_minutes)
    scheduler.start()
    logger.info("🚀 Scheduler started successfully")
    for job in scheduler.get_jobs():
        logger.info(f"   • {job.name} (next run: {job.next_run_time})")


def stop_scheduler(scheduler: AsyncIOScheduler) -> None:
    """
    Stop the scheduler.

    Called during application shutdown (in lifespan).
    """
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("🛑 Scheduler stopped")


def get_scheduler_status(scheduler: AsyncIOScheduler) -> dict:
    """
    Get scheduler status and job information.

    Returns:
        Dict with scheduler status, jobs, and next run times
    """
    jobs = scheduler.get_jobs()

    jobs_info = []
    for job in jobs:
        next_run = getattr(job, "next_run_time", None)
        jobs_info.append({
            "id": job.id,
            "name": job.name,
            "next_run_time": next_run.isoformat() if next_run else None,
            "trigger": str(job.trigger),
        })

    return {
        "running": scheduler.running,
        "total_jobs": len(jobs),
        "jobs": jobs_info,
    }

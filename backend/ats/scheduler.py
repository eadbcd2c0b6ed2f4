"""
Maintenance Scheduler - periodic cleanup using APScheduler

Cascade and single deletes treat file removal as best effort, and an
upload can be stored moments before its row insert fails, so the upload
directory can accumulate files nothing references. This sweep repairs
that and also clears password-reset tokens that have expired.

Maintenance Pass:
    1. Clear reset_password_token / reset_password_expires where expired
    2. Delete upload files not referenced by any application's cv_url and
       older than the grace period (protects uploads whose row is being
       written right now)

Default Schedule: Every 24 hours (CLEANUP_INTERVAL_HOURS, 0 disables)
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ats.database import Database
from ats.models import Application, User, utcnow
from ats.services.file_store import FileStore

logger = logging.getLogger(__name__)

JOB_ID = "maintenance"


@dataclass
class MaintenanceReport:
    expired_tokens_cleared: int = 0
    orphaned_files_removed: int = 0


async def clear_expired_reset_tokens(db: AsyncSession) -> int:
    now = utcnow()
    result = await db.execute(
        update(User)
        .where(User.reset_password_expires.is_not(None), User.reset_password_expires <= now)
        .values(reset_password_token=None, reset_password_expires=None, **User.touched_values(now))
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount


async def sweep_orphaned_uploads(
    db: AsyncSession,
    files: FileStore,
    grace_seconds: float,
    now: Optional[float] = None,
) -> int:
    """
    Remove stored files no application points to.

    Returns:
        Number of files removed
    """
    now = now if now is not None else time.time()
    result = await db.execute(select(Application.cv_url))
    referenced = {files.resolve(url).name for (url,) in result.all() if url}

    removed = 0
    for name in files.list_names():
        if name in referenced:
            continue
        try:
            if now - files.modified_at(name) < grace_seconds:
                continue
            if await files.delete(name):
                removed += 1
        except OSError as e:
            logger.warning(f"Could not remove orphaned upload {name}: {e}")
    return removed


async def run_maintenance(
    database: Database,
    files: FileStore,
    grace_seconds: float,
) -> MaintenanceReport:
    report = MaintenanceReport()
    async with database.session() as db:
        report.expired_tokens_cleared = await clear_expired_reset_tokens(db)
        report.orphaned_files_removed = await sweep_orphaned_uploads(db, files, grace_seconds)

    logger.info(
        f"Maintenance complete: {report.expired_tokens_cleared} expired reset tokens cleared, "
        f"{report.orphaned_files_removed} orphaned uploads removed"
    )
    return report


async def _scheduled_maintenance(database: Database, files: FileStore, grace_seconds: float) -> None:
    try:
        await run_maintenance(database, files, grace_seconds)
    except Exception:
        logger.exception("Maintenance pass failed")


def start_scheduler(
    database: Database,
    files: FileStore,
    interval_hours: int,
    grace_minutes: int = 60,
) -> Optional[AsyncIOScheduler]:
    """
    Start the periodic maintenance job.

    Returns:
        The running scheduler, or None when interval_hours is 0
    """
    if interval_hours <= 0:
        logger.info("Maintenance scheduler disabled")
        return None

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        _scheduled_maintenance,
        trigger=IntervalTrigger(hours=interval_hours),
        args=[database, files, grace_minutes * 60],
        id=JOB_ID,
        name="Clear expired reset tokens and orphaned uploads",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(f"Maintenance scheduler started (every {interval_hours}h)")
    return scheduler


def stop_scheduler(scheduler: Optional[AsyncIOScheduler]) -> None:
    if scheduler and scheduler.running:
        scheduler.shutdown(wait=False)

"""
Shared job runner for scheduled background jobs.
Used by the server scheduler and the run_reminders script.
Each run_* returns a dict with "message" and "count".
"""
import logging
from datetime import date
from typing import Optional

logger = logging.getLogger(__name__)


async def run_daily_reminders(as_of: Optional[date] = None, owner_id: Optional[str] = None):
    try:
        from services.jobs import JobScheduler
        job_scheduler = JobScheduler()
        await job_scheduler.connect()
        try:
            count = await job_scheduler.send_daily_reminders(as_of=as_of, owner_id=owner_id)
        finally:
            await job_scheduler.close()
        logger.info(f"Daily reminders job completed: {count} reminders sent")
        return {"message": f"Daily reminders sent: {count}", "count": count}
    except Exception as e:
        logger.error(f"Daily reminders job failed: {e}")
        raise

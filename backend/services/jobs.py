"""Background jobs for renewal reminders - Agency Renewal Desk"""
from database import database
from models import DispatchStatus, UserStatus
from services.renewal_monitor import run_owner_reminders
from datetime import date
from typing import Optional
import logging

logger = logging.getLogger(__name__)

class JobScheduler:
    """Runs the reminder pass over every active owner.

    Uses the shared ``database`` connection; if nothing has connected it yet
    (a standalone run), the scheduler opens and later closes it.
    """

    def __init__(self):
        self._owns_connection = False

    async def connect(self):
        if database.get_db() is None:
            await database.connect()
            self._owns_connection = True
            logger.info("Job scheduler connected to MongoDB")

    async def close(self):
        if self._owns_connection:
            await database.close()
            self._owns_connection = False

    async def send_daily_reminders(self, as_of: Optional[date] = None, owner_id: Optional[str] = None) -> int:
        """Send today's renewal reminders for every active owner (or just ``owner_id``).

        A failure for one owner is logged and does not stop the others.
        Returns the number of reminder emails sent.
        """
        logger.info("Running daily reminder job...")
        db = database.get_db()

        query = {"status": UserStatus.ACTIVE.value}
        if owner_id:
            query["user_id"] = owner_id

        reminder_count = 0

        async for owner in db.users.find(query, {"_id": 0, "user_id": 1, "email": 1}):
            try:
                outcomes = await run_owner_reminders(owner, as_of=as_of)
            except Exception as e:
                logger.error(f"Reminder pass failed for owner {owner.get('user_id')}: {e}", exc_info=True)
                continue

            reminder_count += sum(1 for o in outcomes if o.status == DispatchStatus.SENT)

        logger.info(f"Daily reminder job complete. Sent {reminder_count} reminders.")
        return reminder_count

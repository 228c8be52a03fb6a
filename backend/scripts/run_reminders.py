"""
Run the daily renewal reminder pass once, outside the API scheduler.

Usage (from backend/):
  python -m scripts.run_reminders
  python -m scripts.run_reminders --as-of 2026-03-01       # evaluate as if today were this date
  python -m scripts.run_reminders --owner-id <user_id>     # a single owner only

Production (cron example, if the API scheduler is disabled):
  0 9 * * * cd /app/backend && python -m scripts.run_reminders
"""
import asyncio
import argparse
import logging
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from database import database
from job_runner import run_daily_reminders


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Send today's renewal reminders")
    parser.add_argument("--as-of", type=date.fromisoformat, default=None, help="Evaluation date (YYYY-MM-DD, default today UTC)")
    parser.add_argument("--owner-id", default=None, help="Only run for this owner")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    async def _():
        await database.connect()
        try:
            result = await run_daily_reminders(as_of=args.as_of, owner_id=args.owner_id)
            print(result["message"])
            return 0
        finally:
            await database.close()

    return asyncio.run(_())


if __name__ == "__main__":
    sys.exit(main())

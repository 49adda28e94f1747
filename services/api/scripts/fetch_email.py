#!/usr/bin/env python3
"""Email report fetch for Railway Cron.

Alternative to the in-process scheduler for deployments that run the API
with several workers or with EMAIL_FETCH_ENABLED=false.

Behavior:
- Same staleness guard as the scheduler: skipped when the last successful
  fetch is younger than EMAIL_FETCH_MIN_INTERVAL_HOURS.
- FETCH_FORCE_DAYS=<n> bypasses the guard and scans the last n days.

Run (local / Railway):
  cd services/api
  python -m scripts.fetch_email
"""

import asyncio
import logging
import os
import sys


# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from opsboard.services.email_pipeline import fetch_email_reports  # noqa: E402
from opsboard.services.scheduler import EmailFetchScheduler  # noqa: E402
from opsboard.stores import imports  # noqa: E402
from opsboard.stores.postgres import close_db, init_db, ping_db  # noqa: E402
from opsboard.stores.redis import close_redis, init_redis  # noqa: E402

logger = logging.getLogger("uvicorn.error")


async def main() -> None:
    logging.basicConfig(level=logging.INFO)

    # Initialize shared connections (same as API lifespan, but for a one-off cron run)
    await init_db()
    await ping_db()
    try:
        await init_redis()
    except Exception:
        # Cron can still run without Redis; the fetch lock is skipped.
        logger.warning("[email] Redis unavailable, running without fetch lock")

    try:
        force_days = os.getenv("FETCH_FORCE_DAYS", "").strip()
        if force_days:
            days_back = int(force_days)
            result = await fetch_email_reports(days_back)
            await imports.log_email_fetch(days_back, result.emails_scanned, result.reports_imported)
        else:
            result = await EmailFetchScheduler().run_if_needed("cron")

        # Final output for Railway logs
        if result is None:
            print({"ok": True, "skipped": True})
        else:
            print(
                {
                    "ok": True,
                    "emailsScanned": result.emails_scanned,
                    "reportsImported": result.reports_imported,
                    "errors": result.errors,
                }
            )
    finally:
        await close_redis()
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())

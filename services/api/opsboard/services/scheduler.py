"""Scheduled email fetch.

EmailFetchScheduler owns three background tasks on the running event loop:
- a startup check shortly after boot
- a daily run at the configured local hour (business timezone)
- a fallback check every few hours

Every trigger goes through run_if_needed(), which skips when the last
successful fetch is younger than the minimum interval and otherwise looks
back far enough to cover the gap. The clock, fetch job and log store are
injected so the policy can be tested without IMAP or a database.
"""

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone

from opsboard.schemas import EmailFetchResult
from opsboard.services.clock import business_now
from opsboard.services.email_pipeline import fetch_email_reports
from opsboard.settings import Settings, get_settings
from opsboard.stores import imports
from opsboard.stores.redis import TTL_EMAIL_FETCH_LOCK, try_acquire_lock, try_release_lock

logger = logging.getLogger("uvicorn.error")

NEVER_FETCHED_HOURS = 999.0
MIN_DAYS_BACK = 3
MAX_DAYS_BACK = 14

LOCK_KEY = "email-fetch"

SOURCE_STARTUP = "startup-check"
SOURCE_DAILY = "daily"
SOURCE_FALLBACK = "fallback"

FetchJob = Callable[[int], Awaitable[EmailFetchResult]]
LastFetch = Callable[[], Awaitable[datetime | None]]
LogFetch = Callable[[int, int, int, str], Awaitable[None]]


def days_back_for(hours_stale: float) -> int:
    """Search window covering the gap since the last fetch, clamped to 3..14 days."""
    return min(max(math.ceil(hours_stale / 24) + 1, MIN_DAYS_BACK), MAX_DAYS_BACK)


def seconds_until(now: datetime, hour: int) -> float:
    """Seconds from now until the next local `hour`:00 (tomorrow if already past)."""
    next_run = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if next_run <= now:
        next_run += timedelta(days=1)
    return (next_run.astimezone(timezone.utc) - now.astimezone(timezone.utc)).total_seconds()


async def _log_fetch(days_back: int, emails_scanned: int, reports_imported: int, status: str) -> None:
    await imports.log_email_fetch(days_back, emails_scanned, reports_imported, status=status)


class EmailFetchScheduler:
    """Background email fetch with a staleness guard."""

    def __init__(
        self,
        fetch_job: FetchJob | None = None,
        last_fetch: LastFetch | None = None,
        log_fetch: LogFetch | None = None,
        now: Callable[[], datetime] | None = None,
        settings: Settings | None = None,
    ):
        self._fetch_job = fetch_job or fetch_email_reports
        self._last_fetch = last_fetch or imports.last_successful_email_fetch
        self._log_fetch = log_fetch or _log_fetch
        self._now = now or business_now
        self._settings = settings or get_settings()
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    async def hours_since_last_fetch(self) -> float:
        last = await self._last_fetch()
        if last is None:
            return NEVER_FETCHED_HOURS
        return (self._now() - last).total_seconds() / 3600

    async def run_if_needed(self, source: str) -> EmailFetchResult | None:
        """Fetch unless a successful fetch happened recently.

        Args:
            source: Trigger name used in log lines.

        Returns:
            The fetch result, or None when skipped or failed.
        """
        if not self._settings.imap_configured:
            return None

        acquired = await try_acquire_lock(LOCK_KEY, ttl=TTL_EMAIL_FETCH_LOCK)
        if acquired is False:
            logger.info("[email] %s: fetch already running elsewhere, skipping", source)
            return None

        try:
            return await self._run(source)
        finally:
            if acquired:
                await try_release_lock(LOCK_KEY)

    async def _run(self, source: str) -> EmailFetchResult | None:
        hours_stale = await self.hours_since_last_fetch()
        if hours_stale < self._settings.email_fetch_min_interval_hours:
            logger.info("[email] %s: Last fetch was %.1fh ago, skipping", source, hours_stale)
            return None

        days_back = days_back_for(hours_stale)
        logger.info(
            "[email] %s: Last fetch was %.1fh ago, fetching %s days back...",
            source,
            hours_stale,
            days_back,
        )

        try:
            result = await self._fetch_job(days_back)
        except Exception as e:
            logger.error("[email] %s error: %s", source, e)
            await self._log_fetch(days_back, 0, 0, f"error: {e}")
            return None

        await self._log_fetch(days_back, result.emails_scanned, result.reports_imported, imports.EMAIL_FETCH_SUCCESS)
        if result.reports_imported > 0:
            logger.info(
                "[email] %s: %s reports imported from %s emails",
                source,
                result.reports_imported,
                result.emails_scanned,
            )
        else:
            logger.info("[email] %s: No new reports found in %s emails", source, result.emails_scanned)
        return result

    # ============================================================
    # Lifecycle
    # ============================================================

    def start(self) -> None:
        """Schedule the startup, daily and fallback triggers on the running loop."""
        if self.running:
            return

        hour = self._settings.email_fetch_hour
        logger.info(
            "[email] Scheduled daily fetch at %02d:00 %s (next in %.1fh)",
            hour,
            self._settings.business_timezone,
            seconds_until(self._now(), hour) / 3600,
        )
        self._tasks = [
            asyncio.create_task(self._startup_check()),
            asyncio.create_task(self._daily_loop()),
            asyncio.create_task(self._fallback_loop()),
        ]

    async def stop(self) -> None:
        """Cancel all scheduled triggers and wait for them to finish."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _guarded_run(self, source: str) -> None:
        try:
            await self.run_if_needed(source)
        except Exception:
            logger.exception("[email] %s check failed", source)

    async def _startup_check(self) -> None:
        await asyncio.sleep(self._settings.email_fetch_startup_delay_seconds)
        await self._guarded_run(SOURCE_STARTUP)

    async def _daily_loop(self) -> None:
        while True:
            await asyncio.sleep(seconds_until(self._now(), self._settings.email_fetch_hour))
            await self._guarded_run(SOURCE_DAILY)

    async def _fallback_loop(self) -> None:
        interval = self._settings.email_fetch_fallback_hours * 3600
        while True:
            await asyncio.sleep(interval)
            await self._guarded_run(SOURCE_FALLBACK)

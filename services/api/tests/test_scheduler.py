"""Tests for the email fetch scheduler."""

import asyncio
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from opsboard.schemas import EmailFetchResult
from opsboard.services import scheduler as scheduler_module
from opsboard.services.scheduler import EmailFetchScheduler, days_back_for, seconds_until
from opsboard.settings import get_settings

NEW_YORK = ZoneInfo("America/New_York")
NOW = datetime(2024, 3, 10, 9, 0, tzinfo=NEW_YORK)


@pytest.mark.parametrize(
    ("hours_stale", "expected"),
    [(999, 14), (13, 3), (50, 4), (72, 4), (500, 14)],
)
def test_days_back_for(hours_stale: float, expected: int):
    assert days_back_for(hours_stale) == expected


def test_seconds_until_later_today():
    now = datetime(2024, 3, 12, 5, 30, tzinfo=NEW_YORK)
    assert seconds_until(now, 6) == 1800


def test_seconds_until_tomorrow_across_dst_change():
    # clocks jump forward at 02:00 on 10 March 2024
    now = datetime(2024, 3, 9, 7, 0, tzinfo=NEW_YORK)
    assert seconds_until(now, 6) == 22 * 3600


class FakeFetchLog:
    def __init__(self, last: datetime | None = None):
        self.last = last
        self.entries: list[tuple[int, int, int, str]] = []

    async def last_fetch(self) -> datetime | None:
        return self.last

    async def log(self, days_back: int, emails_scanned: int, reports_imported: int, status: str) -> None:
        self.entries.append((days_back, emails_scanned, reports_imported, status))


def configured_settings(**overrides):
    update = {
        "imap_user": "ops@example.com",
        "imap_pass": "secret",
        "email_fetch_min_interval_hours": 12.0,
        "email_fetch_startup_delay_seconds": 0.0,
    }
    update.update(overrides)
    return get_settings().model_copy(update=update)


def make_scheduler(fetch_log: FakeFetchLog, fetch_job, **overrides) -> EmailFetchScheduler:
    return EmailFetchScheduler(
        fetch_job=fetch_job,
        last_fetch=fetch_log.last_fetch,
        log_fetch=fetch_log.log,
        now=lambda: NOW,
        settings=configured_settings(**overrides),
    )


@pytest.mark.asyncio
async def test_recent_fetch_is_skipped():
    calls: list[int] = []

    async def fetch(days_back: int) -> EmailFetchResult:
        calls.append(days_back)
        return EmailFetchResult()

    fetch_log = FakeFetchLog(last=NOW - timedelta(hours=2))
    result = await make_scheduler(fetch_log, fetch).run_if_needed("daily")

    assert result is None
    assert calls == []
    assert fetch_log.entries == []


@pytest.mark.asyncio
async def test_never_fetched_looks_back_fourteen_days():
    calls: list[int] = []

    async def fetch(days_back: int) -> EmailFetchResult:
        calls.append(days_back)
        return EmailFetchResult(emails_scanned=5, reports_imported=2)

    fetch_log = FakeFetchLog()
    result = await make_scheduler(fetch_log, fetch).run_if_needed("startup-check")

    assert result is not None
    assert result.reports_imported == 2
    assert calls == [14]
    assert fetch_log.entries == [(14, 5, 2, "success")]


@pytest.mark.asyncio
async def test_stale_fetch_covers_the_gap():
    calls: list[int] = []

    async def fetch(days_back: int) -> EmailFetchResult:
        calls.append(days_back)
        return EmailFetchResult()

    fetch_log = FakeFetchLog(last=NOW - timedelta(hours=30))
    await make_scheduler(fetch_log, fetch).run_if_needed("fallback")

    assert calls == [3]


@pytest.mark.asyncio
async def test_fetch_error_is_logged_not_raised():
    async def fetch(days_back: int) -> EmailFetchResult:
        raise OSError("imap unreachable")

    fetch_log = FakeFetchLog()
    result = await make_scheduler(fetch_log, fetch).run_if_needed("daily")

    assert result is None
    assert fetch_log.entries == [(14, 0, 0, "error: imap unreachable")]


@pytest.mark.asyncio
async def test_not_configured_does_nothing():
    calls: list[int] = []

    async def fetch(days_back: int) -> EmailFetchResult:
        calls.append(days_back)
        return EmailFetchResult()

    fetch_log = FakeFetchLog()
    scheduler = make_scheduler(fetch_log, fetch, imap_user="", imap_pass="")

    assert await scheduler.run_if_needed("daily") is None
    assert calls == []


@pytest.mark.asyncio
async def test_held_lock_skips_fetch(monkeypatch: pytest.MonkeyPatch):
    async def locked(key: str, ttl: int = 0) -> bool:
        return False

    monkeypatch.setattr(scheduler_module, "try_acquire_lock", locked)
    calls: list[int] = []

    async def fetch(days_back: int) -> EmailFetchResult:
        calls.append(days_back)
        return EmailFetchResult()

    assert await make_scheduler(FakeFetchLog(), fetch).run_if_needed("daily") is None
    assert calls == []


@pytest.mark.asyncio
async def test_start_runs_startup_check_and_stop_cancels():
    fetched = asyncio.Event()

    async def fetch(days_back: int) -> EmailFetchResult:
        fetched.set()
        return EmailFetchResult()

    scheduler = make_scheduler(FakeFetchLog(), fetch)
    scheduler.start()
    assert scheduler.running

    await asyncio.wait_for(fetched.wait(), timeout=2)
    await scheduler.stop()

    assert not scheduler.running

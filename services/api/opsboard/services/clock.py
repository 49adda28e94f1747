"""Business-calendar clock.

Every dashboard window (MTD, last month, SMLY, trailing weeks) is computed
from "today" in the business timezone. Orchestrators accept an explicit
`today` so date logic can be tested with fixed dates; this module is the
only place that reads the wall clock.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from opsboard.settings import get_settings


def business_now() -> datetime:
    """Current timezone-aware datetime in the business timezone."""
    return datetime.now(ZoneInfo(get_settings().business_timezone))


def business_today() -> date:
    """Current calendar date in the business timezone."""
    return business_now().date()

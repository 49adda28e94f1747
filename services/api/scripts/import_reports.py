#!/usr/bin/env python3
"""Import report workbooks from disk.

Useful for backfills: the report type of each file is detected from its
name, exactly like an upload.

Run:
  cd services/api
  python -m scripts.import_reports ~/exports/Profit_By_Order_Detail.xlsx ~/exports/*.xlsx
"""

import asyncio
import os
import sys
from pathlib import Path


# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from opsboard.services.ingestion import import_report, refresh_names_quietly  # noqa: E402
from opsboard.services.parsers import ReportType, detect_report_type  # noqa: E402
from opsboard.stores.analytics import get_analytics_store  # noqa: E402
from opsboard.stores.postgres import close_db, init_db, ping_db  # noqa: E402


async def main() -> None:
    paths = [Path(arg) for arg in sys.argv[1:]]
    if not paths:
        print("usage: python -m scripts.import_reports FILE.xlsx [FILE.xlsx ...]")
        return

    await init_db()
    await ping_db()

    try:
        for path in paths:
            if detect_report_type(path.name) == ReportType.UNKNOWN:
                print(f"skip {path.name}: unknown report type")
                continue
            result = await import_report(path.read_bytes(), path.name, refresh_names=False)
            print(f"{path.name}: {result.model_dump(by_alias=True)}")

        await refresh_names_quietly(get_analytics_store())
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())

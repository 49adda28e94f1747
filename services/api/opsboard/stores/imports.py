"""Write-side repository for report imports.

Sales, P&L and channel rows are upserted on their natural key
(INSERT ... ON CONFLICT DO UPDATE) in batches of 500. Inventory and the
product-name cache are full-replace tables: delete everything, then insert.

Upsert accounting mirrors what the import screen shows:
- inserted: keys not present before the import
- updated:  keys already present (even when values are identical)
- unchanged: always 0, rows are never compared field by field
"""

from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select, tuple_
from sqlalchemy.dialects.postgresql import insert as pg_insert

from opsboard.models import ChannelSale, DailySale, EmailFetchLog, InventoryItem, OrderPnl, ProductName
from opsboard.stores.postgres import get_session

BATCH_SIZE = 500

# Tables that may be emptied from the data-status screen
CLEARABLE_TABLES: dict[str, type] = {
    "daily_sales": DailySale,
    "order_pnl": OrderPnl,
    "inventory_current": InventoryItem,
    "channel_sales": ChannelSale,
}

EMAIL_FETCH_SUCCESS = "success"


@dataclass(frozen=True)
class UpsertResult:
    """Row accounting for one import."""

    inserted: int = 0
    updated: int = 0
    unchanged: int = 0


def classify_upsert_keys(keys: Iterable[Hashable], existing: set) -> UpsertResult:
    """Count distinct natural keys as inserted (new) or updated (already stored).

    Args:
        keys: Natural keys of the incoming rows (duplicates allowed).
        existing: Keys already present in storage.

    Returns:
        UpsertResult with unchanged always 0.
    """
    unique = set(keys)
    updated = len(unique & existing)
    return UpsertResult(inserted=len(unique) - updated, updated=updated, unchanged=0)


def _batches(rows: Sequence[Any], size: int = BATCH_SIZE):
    for start in range(0, len(rows), size):
        yield rows[start:start + size]


async def _existing_keys(key_columns: Sequence, keys: list) -> set:
    """Look up which natural keys already exist, BATCH_SIZE keys per query."""
    found: set = set()
    composite = len(key_columns) > 1
    target = tuple_(*key_columns) if composite else key_columns[0]
    async with get_session() as session:
        for batch in _batches(keys):
            result = await session.execute(select(*key_columns).where(target.in_(batch)))
            for row in result:
                found.add(tuple(row) if composite else row[0])
    return found


async def _upsert(
    model: type,
    rows: list[dict[str, Any]],
    key_fields: tuple[str, ...],
) -> UpsertResult:
    if not rows:
        return UpsertResult()

    key_columns = [getattr(model, name) for name in key_fields]
    if len(key_fields) > 1:
        keys = [tuple(row[name] for name in key_fields) for row in rows]
    else:
        keys = [row[key_fields[0]] for row in rows]

    unique_keys = list(dict.fromkeys(keys))
    counts = classify_upsert_keys(keys, await _existing_keys(key_columns, unique_keys))

    update_fields = [name for name in rows[0] if name not in key_fields]
    async with get_session() as session:
        for batch in _batches(rows):
            stmt = pg_insert(model).values(list(batch))
            stmt = stmt.on_conflict_do_update(
                index_elements=key_columns,
                set_={name: stmt.excluded[name] for name in update_fields},
            )
            await session.execute(stmt)

    return counts


# ============================================================
# Report tables
# ============================================================


async def upsert_daily_sales(rows: list[dict[str, Any]]) -> UpsertResult:
    """Upsert daily sales on (ship_date, sku).

    Rows must already be pre-aggregated: one row per key within the batch.
    """
    return await _upsert(DailySale, rows, ("ship_date", "sku"))


async def upsert_order_pnl(rows: list[dict[str, Any]]) -> UpsertResult:
    """Upsert order P&L lines on order_id."""
    # ON CONFLICT cannot touch the same key twice in one statement; last row wins
    deduped = list({row["order_id"]: row for row in rows}.values())
    return await _upsert(OrderPnl, deduped, ("order_id",))


async def upsert_channel_sales(rows: list[dict[str, Any]]) -> UpsertResult:
    """Upsert channel breakdown rows on (report_date, sku)."""
    deduped = list({(row["report_date"], row["sku"]): row for row in rows}.values())
    return await _upsert(ChannelSale, deduped, ("report_date", "sku"))


async def replace_inventory(rows: list[dict[str, Any]]) -> UpsertResult:
    """Replace the inventory snapshot.

    An empty batch is a no-op: a report with no rows for the tracked
    warehouse must not wipe the current snapshot.
    """
    if not rows:
        return UpsertResult()

    deduped = list({row["sku"]: row for row in rows}.values())
    async with get_session() as session:
        await session.execute(delete(InventoryItem))
        for batch in _batches(deduped):
            await session.execute(pg_insert(InventoryItem).values(list(batch)))

    return UpsertResult(inserted=len(deduped))


async def clear_table(name: str) -> None:
    """Delete every row of a clearable report table.

    Raises:
        KeyError: If name is not one of CLEARABLE_TABLES.
    """
    model = CLEARABLE_TABLES[name]
    async with get_session() as session:
        await session.execute(delete(model))


async def table_counts() -> dict[str, int]:
    """Row count per clearable report table."""
    counts: dict[str, int] = {}
    async with get_session() as session:
        for name, model in CLEARABLE_TABLES.items():
            result = await session.execute(select(func.count()).select_from(model))
            counts[name] = int(result.scalar_one())
    return counts


# ============================================================
# Product-name cache
# ============================================================


async def replace_product_names(rows: list[dict[str, str]]) -> int:
    """Rebuild the display-name cache (delete-all, batched reinsert)."""
    async with get_session() as session:
        await session.execute(delete(ProductName))
        for batch in _batches(rows):
            await session.execute(pg_insert(ProductName).values(list(batch)))
    return len(rows)


# ============================================================
# Email fetch log
# ============================================================


async def log_email_fetch(
    days_back: int,
    emails_scanned: int,
    reports_imported: int,
    status: str = EMAIL_FETCH_SUCCESS,
) -> None:
    """Append one row to the email fetch log."""
    async with get_session() as session:
        session.add(
            EmailFetchLog(
                days_back=days_back,
                emails_scanned=emails_scanned,
                reports_imported=reports_imported,
                status=status,
            )
        )


async def last_successful_email_fetch() -> datetime | None:
    """Timestamp of the most recent successful email fetch, if any."""
    query = (
        select(EmailFetchLog.fetched_at)
        .where(EmailFetchLog.status == EMAIL_FETCH_SUCCESS)
        .order_by(EmailFetchLog.fetched_at.desc())
        .limit(1)
    )
    async with get_session() as session:
        result = await session.execute(query)
        return result.scalar_one_or_none()

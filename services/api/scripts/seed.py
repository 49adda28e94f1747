#!/usr/bin/env python3
"""Seed database with demo data.

Creates:
- Inventory snapshot for a handful of phone / tablet / laptop families
- Daily sales for the last ~14 months (deterministic pseudo-random volumes)
- Order P&L rows matching those sales across several channels
- Product-name cache

Seed script is idempotent: sales and orders are upserted on their natural
keys, inventory and names are fully replaced.

Usage:
    cd services/api
    python -m scripts.seed
"""

import asyncio
import os
import random
import sys
from datetime import date, timedelta
from decimal import Decimal

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

from opsboard.services.clock import business_today
from opsboard.services.product_names import refresh_product_names
from opsboard.services.sku import map_channel, parse_sku
from opsboard.stores import imports
from opsboard.stores.analytics import get_analytics_store
from opsboard.stores.postgres import close_db, create_tables, init_db

load_dotenv()

# ============================================================
# Demo catalogue
# ============================================================
# grades maps grade -> (mean units/day, units on hand in the snapshot).

DEMO_FAMILIES: list[dict] = [
    {"family": "PA-IPH13-UN-128", "name": "iPhone 13 128GB Unlocked", "cost": 310, "price": 429, "grades": {"CA": (1.2, 18), "CAB": (0.8, 4), "SD": (0.3, 25)}},
    {"family": "PA-IPH14P-UN-256", "name": "iPhone 14 Pro 256GB Unlocked", "cost": 560, "price": 719, "grades": {"CAP1": (0.9, 6), "CA": (0.6, 0)}},
    {"family": "PA-GS22-UN-128", "name": "Galaxy S22 128GB Unlocked", "cost": 210, "price": 299, "grades": {"CA": (0.4, 40), "SD": (0.0, 12)}},
    {"family": "TA-IPDA-WI-64", "name": "iPad Air 64GB WiFi", "cost": 240, "price": 339, "grades": {"CA": (0.5, 9), "XF": (0.0, 3)}},
    {"family": "LA-MBA-M1-256", "name": "MacBook Air M1 256GB", "cost": 480, "price": 649, "grades": {"CA": (0.3, 5), "INTAKE": (0.0, 14)}},
    {"family": "AA-AW-S7-45", "name": "Apple Watch Series 7 45mm", "cost": 140, "price": 209, "grades": {"CA": (0.2, 30)}},
]

DEMO_CHANNELS: list[tuple[str, str]] = [
    ("Amazon", ""),
    ("BackMarket", ""),
    ("eBayOrder", ""),
    ("Website", "Reebelo Inc"),
    ("Website", "Swappa LLC"),
    ("Walmart_Marketplace", ""),
]

HISTORY_DAYS = 430
WAREHOUSE = "AW Main"


def _money(value: float) -> Decimal:
    return Decimal(str(round(value, 2)))


def build_demo_rows(today: date, seed: int = 42) -> tuple[list[dict], list[dict], list[dict]]:
    """Generate (inventory, daily_sales, order_pnl) rows for the demo catalogue."""
    rng = random.Random(seed)
    inventory: list[dict] = []
    daily_sales: list[dict] = []
    orders: list[dict] = []

    for fam in DEMO_FAMILIES:
        for grade, (rate, stock) in fam["grades"].items():
            sku = f"{fam['family']}-{grade}"
            parsed = parse_sku(sku)
            inventory.append(
                {
                    "sku": sku,
                    "product_name": f"{fam['name']} ({grade})",
                    "warehouse": WAREHOUSE,
                    "physical": stock,
                    "reserved": 0,
                    "available": stock,
                    "cost": _money(fam["cost"]),
                    "value": _money(fam["cost"] * stock),
                    "list_price": _money(fam["price"]),
                    "site_price": _money(fam["price"] * 0.97),
                    "last_received": (today - timedelta(days=rng.randint(3, 60))).isoformat(),
                    "prefix": parsed.prefix,
                    "category": parsed.category,
                    "grade": parsed.grade,
                    "bucket": parsed.bucket,
                    "product_family": parsed.product_family,
                    "snapshot_date": today,
                }
            )

            if rate <= 0:
                continue
            for offset in range(HISTORY_DAYS):
                day = today - timedelta(days=offset)
                qty = sum(1 for _ in range(3) if rng.random() < rate / 3)
                if qty == 0:
                    continue
                price = fam["price"] * rng.uniform(0.92, 1.05)
                daily_sales.append(
                    {
                        "ship_date": day,
                        "sku": sku,
                        "product_name": f"{fam['name']} ({grade})",
                        "orders": qty,
                        "qty_sold": qty,
                        "subtotal": _money(price * qty),
                        "total_sales": _money(price * qty * 1.07),
                        "available_qty": stock,
                    }
                )

                channel_raw, company = rng.choice(DEMO_CHANNELS)
                fees = price * qty * rng.uniform(0.08, 0.15)
                items_cost = fam["cost"] * qty
                orders.append(
                    {
                        "order_id": f"SO-{day:%Y%m%d}-{sku}",
                        "order_date": day - timedelta(days=1),
                        "ship_date": day,
                        "channel_raw": channel_raw,
                        "company": company,
                        "channel": map_channel(channel_raw, company),
                        "qty": qty,
                        "subtotal": _money(price * qty),
                        "grand_total": _money(price * qty),
                        "items_cost": _money(items_cost),
                        "shipping_cost": _money(12 * qty),
                        "commission": _money(fees * 0.8),
                        "transaction_fee": _money(fees * 0.2),
                        "posting_fee": _money(0),
                        "total_fees": _money(fees),
                        "accrual_profit": _money(price * qty - items_cost - fees - 12 * qty),
                        "cash_profit": _money(price * qty - items_cost - fees - 12 * qty),
                        "accrual_margin": _money((price * qty - items_cost - fees - 12 * qty) / (price * qty) * 100),
                    }
                )

    return inventory, daily_sales, orders


async def seed_database() -> None:
    """Seed database with demo data."""
    await init_db()
    await create_tables()

    try:
        print("Seeding database...")
        inventory, daily_sales, orders = build_demo_rows(business_today())

        result = await imports.replace_inventory(inventory)
        print(f"  inventory_current: {result.inserted} rows")

        result = await imports.upsert_daily_sales(daily_sales)
        print(f"  daily_sales: {result.inserted} inserted, {result.updated} updated")

        result = await imports.upsert_order_pnl(orders)
        print(f"  order_pnl: {result.inserted} inserted, {result.updated} updated")

        count = await refresh_product_names(get_analytics_store())
        print(f"  product_names: {count} rows")
        print("Database seeded successfully!")
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(seed_database())

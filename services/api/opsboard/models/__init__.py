"""SQLAlchemy ORM models.

Models represent database tables:
- daily_sales: Per-SKU units/revenue by ship date
- order_pnl: Order-level profit and loss
- inventory_current: Current stock snapshot (full replace on import)
- channel_sales: Per-SKU channel breakdown
- product_names: Derived display-name cache
- email_fetch_log: Email pipeline run history
"""

from opsboard.models.channel_sale import ChannelSale
from opsboard.models.daily_sale import DailySale
from opsboard.models.email_fetch_log import EmailFetchLog
from opsboard.models.inventory import InventoryItem
from opsboard.models.order_pnl import OrderPnl
from opsboard.models.product_name import ProductName

__all__ = ["ChannelSale", "DailySale", "EmailFetchLog", "InventoryItem", "OrderPnl", "ProductName"]

"""ProductName model.

Derived cache of the best-known display name per SKU, rebuilt after every
import. name_source is one of: inventory, sales, parsed.
"""

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from opsboard.stores.postgres import Base


class ProductName(Base):
    """Resolved display name for a SKU."""

    __tablename__ = "product_names"

    sku: Mapped[str] = mapped_column(Text, primary_key=True)
    display_name: Mapped[str] = mapped_column(Text)
    name_source: Mapped[str] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<ProductName {self.sku} ({self.name_source})>"

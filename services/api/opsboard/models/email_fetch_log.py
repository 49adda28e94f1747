"""EmailFetchLog model.

One row per scheduled/manual email fetch. status is "success" or
"error: <message>"; the scheduler's 12h guard reads the latest success.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from opsboard.stores.postgres import Base


class EmailFetchLog(Base):
    """Email pipeline run log."""

    __tablename__ = "email_fetch_log"

    id: Mapped[int] = mapped_column(primary_key=True)

    fetched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )
    days_back: Mapped[int | None] = mapped_column(Integer)
    emails_scanned: Mapped[int] = mapped_column(Integer, default=0)
    reports_imported: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<EmailFetchLog {self.fetched_at} {self.status}>"

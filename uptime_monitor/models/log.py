"""Log model - one probe outcome per website per minute."""

from sqlalchemy import Column, Integer, SmallInteger, String, ForeignKey, UniqueConstraint

from uptime_monitor.database.base import Base
from uptime_monitor.models.types import UTCDateTime, minute_now
from uptime_monitor.models.website import ALIAS_MAX_LENGTH


class Log(Base):
    """
    Log model representing the outcome of one probe.

    On PostgreSQL ``created_at`` defaults to ``date_trunc('minute', now())``,
    as in the Alembic migration. The store always supplies the truncated
    timestamp itself so the model also works on SQLite.

    Attributes:
        id: Primary key
        website_alias: Alias of the probed website
        status: HTTP status code (null if no response was received)
        created_at: Probe time truncated to the minute
    """

    __tablename__ = "logs"
    __table_args__ = (
        UniqueConstraint("website_alias", "created_at"),
    )

    id = Column(Integer, primary_key=True)
    website_alias = Column(
        String(ALIAS_MAX_LENGTH),
        ForeignKey("websites.alias"),
        nullable=False
    )
    status = Column(SmallInteger, nullable=True)
    created_at = Column(UTCDateTime, server_default=minute_now(), nullable=False)

    def __repr__(self) -> str:
        """String representation of log."""
        return (
            f"<Log(id={self.id}, website_alias='{self.website_alias}', "
            f"status={self.status}, created_at={self.created_at})>"
        )

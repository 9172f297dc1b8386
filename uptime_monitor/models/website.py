"""Website model - a registered site to probe."""

from sqlalchemy import Column, Integer, String

from uptime_monitor.database.base import Base

ALIAS_MAX_LENGTH = 75


class Website(Base):
    """
    Website model representing a site under monitoring.

    Attributes:
        id: Primary key
        url: Address to probe
        alias: Short unique name, the key logs refer to
    """

    __tablename__ = "websites"

    id = Column(Integer, primary_key=True)
    url = Column(String, nullable=False)
    alias = Column(String(ALIAS_MAX_LENGTH), nullable=False, unique=True)

    def __repr__(self) -> str:
        """String representation of website."""
        return f"<Website(id={self.id}, alias='{self.alias}', url='{self.url}')>"

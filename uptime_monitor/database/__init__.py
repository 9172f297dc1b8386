"""Database module for Uptime Monitor."""

from uptime_monitor.database.base import Base
from uptime_monitor.database.session import create_engine_from_config, create_session_factory

__all__ = ["Base", "create_engine_from_config", "create_session_factory"]

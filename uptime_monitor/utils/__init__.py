"""Utility modules for Uptime Monitor."""

from uptime_monitor.utils.logger import get_logger, setup_logging
from uptime_monitor.utils.retry import retry_with_backoff, RetryError

__all__ = ["get_logger", "setup_logging", "retry_with_backoff", "RetryError"]

"""Uptime Monitor - periodic website probing and availability analytics."""

__version__ = "1.0.0"

"""Error kinds raised by the store and the aggregator."""


class UptimeMonitorError(Exception):
    """Base class for all application-level errors."""
    pass


class ConflictError(UptimeMonitorError):
    """Duplicate alias, or a second log for the same website and minute."""

    def __init__(self, message: str, alias: str):
        self.alias = alias
        self.message = message
        super().__init__(self.message)


class NotFoundError(UptimeMonitorError):
    """Unknown website alias."""

    def __init__(self, alias: str):
        self.alias = alias
        self.message = f"Website '{alias}' not found"
        super().__init__(self.message)


class NoDataError(UptimeMonitorError):
    """Aggregation requested over a window that holds no logs."""

    def __init__(self, alias: str):
        self.alias = alias
        self.message = f"No probe data for website '{alias}' in the requested window"
        super().__init__(self.message)


class TransientError(UptimeMonitorError):
    """Storage unavailable; the operation may succeed if retried later."""

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        self.message = f"Storage unavailable during {operation}: {detail}"
        super().__init__(self.message)

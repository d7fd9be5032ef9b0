"""Pure scheduling and health rules used by the automation controller."""
from datetime import datetime, timedelta
from typing import Optional


class SystemHealth:
    """System health constants."""
    HEALTHY = "healthy"
    WARNING = "warning"
    ERROR = "error"


def next_scheduled_fetch(last_fetch: Optional[datetime], interval: timedelta, now: datetime) -> datetime:
    """
    Time of the next fetch.

    With no completed fetch on record the next fetch is due immediately.
    """
    if last_fetch is None:
        return now
    return last_fetch + interval


def derive_system_health(recent_error_count: int) -> str:
    """Map the number of errors in the health window to a health level."""
    if recent_error_count > 3:
        return SystemHealth.ERROR
    if recent_error_count > 0:
        return SystemHealth.WARNING
    return SystemHealth.HEALTHY

"""Utility functions for time operations."""

from datetime import datetime


def now_local() -> datetime:
    """Current local time, timezone-aware."""
    return datetime.now().astimezone()


def format_report_date(moment: datetime) -> str:
    """Format a timestamp the way ``date`` prints it, e.g. ``Mon Oct 19 14:03:11 CEST 2026``."""
    return moment.strftime("%a %b %d %H:%M:%S %Z %Y").replace("  ", " ")


def format_duration(seconds: float) -> str:
    """Format duration in human readable format."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.1f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.1f}h"

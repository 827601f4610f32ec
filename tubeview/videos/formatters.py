"""Display formatting for counts, dates and durations."""
from datetime import datetime


def format_count(count) -> str:
    """1234567 -> '1,234,567'."""
    return f"{int(count or 0):,}"


def format_date(date_string: str | None) -> str:
    """
    Format an ISO upload date as 'May 15, 2023'.

    Strings that are not ISO dates (e.g. '3 days ago') are returned unchanged.
    """
    if not date_string:
        return ""
    try:
        parsed = datetime.fromisoformat(date_string)
    except ValueError:
        return date_string
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def format_duration_display(duration) -> str:
    if duration in (None, ""):
        return ""
    minutes, seconds = divmod(int(duration), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours:d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:d}:{seconds:02d}"

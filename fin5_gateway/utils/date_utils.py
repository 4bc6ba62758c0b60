"""Date manipulation utilities"""

from datetime import datetime


def start_of_month(now: datetime) -> datetime:
    """Midnight on the first day of now's month (tz-aware if now is)"""
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def add_years(from_date: datetime, years: int) -> datetime:
    """Same calendar day `years` later; Feb 29 falls back to Feb 28"""
    try:
        return from_date.replace(year=from_date.year + years)
    except ValueError:
        return from_date.replace(year=from_date.year + years, day=28)

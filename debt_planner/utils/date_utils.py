"""Date manipulation utilities"""

from calendar import monthrange
from datetime import date


def add_months(from_date: date, months: int) -> date:
    """Shift a date by whole calendar months, clamping the day (Jan 31 + 1 -> Feb 28/29)"""
    month_offset = from_date.month - 1 + months
    year = from_date.year + month_offset // 12
    month = month_offset % 12 + 1
    day = min(from_date.day, monthrange(year, month)[1])
    return date(year, month, day)

"""Date manipulation utilities"""

from datetime import date, datetime, timedelta
from typing import List, Union


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def coerce_date(value: Union[date, datetime, str]) -> date:
    """Accept a date, a datetime or an ISO-8601 string (date part is used)"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])

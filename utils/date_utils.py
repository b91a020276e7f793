"""
Mealwise Date Utilities
Helper functions for timestamps and meal plan date ranges
"""

from datetime import datetime, date, timedelta, timezone
from typing import List, Dict


def utcnow() -> datetime:
    """Naive UTC timestamp used for all persisted datetimes"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_date_range(start_date: date, end_date: date) -> List[date]:
    """
    Get list of dates between start and end date (inclusive)

    Args:
        start_date: Start date
        end_date: End date

    Returns:
        List of dates in range
    """
    if start_date > end_date:
        return []

    dates = []
    current_date = start_date

    while current_date <= end_date:
        dates.append(current_date)
        current_date += timedelta(days=1)

    return dates


def is_date_in_range(target_date: date, start_date: date, end_date: date) -> bool:
    return start_date <= target_date <= end_date


def calculate_meal_plan_duration(start_date: date, end_date: date) -> Dict[str, int]:
    """
    Calculate duration metrics for meal plan

    Args:
        start_date: Plan start date
        end_date: Plan end date

    Returns:
        Dictionary with duration metrics
    """
    if start_date > end_date:
        return {'total_days': 0, 'weekdays': 0, 'weekends': 0, 'weeks': 0}

    dates = get_date_range(start_date, end_date)
    total_days = len(dates)
    weekends = sum(1 for d in dates if d.weekday() >= 5)
    weeks = (total_days + 6) // 7  # Round up to nearest week

    return {
        'total_days': total_days,
        'weekdays': total_days - weekends,
        'weekends': weekends,
        'weeks': weeks
    }

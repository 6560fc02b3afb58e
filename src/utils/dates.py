"""
Date parsing utilities.

Task lines only ever carry ISO dates (YYYY-MM-DD); queries additionally accept
a small relative vocabulary resolved against a reference day.
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional

DATE_FORMAT = "%Y-%m-%d"

_DAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_iso_date(date_str: str) -> Optional[date]:
    """Parse YYYY-MM-DD, returning None for anything that is not a real date."""
    try:
        return datetime.strptime(date_str, DATE_FORMAT).date()
    except ValueError:
        return None


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def parse_date_expression(date_str: str, today: Optional[date] = None) -> Optional[date]:
    """
    Resolve a query date expression to a calendar date.

    Supports:
    - ISO 8601: "2026-02-15"
    - "today", "tomorrow", "yesterday"
    - Weekdays: "friday" (next occurrence, never today), "next monday"
    - Relative: "in 3 days", "in 2 weeks"

    Returns:
        The date, or None if the expression is not understood
    """
    if not date_str:
        return None

    s = date_str.strip().lower()
    today = today or date.today()

    if s == "today":
        return today
    if s == "tomorrow":
        return today + timedelta(days=1)
    if s == "yesterday":
        return today - timedelta(days=1)

    if re.fullmatch(r"\d{4}-\d{2}-\d{2}", s):
        return parse_iso_date(s)

    is_next = s.startswith("next ")
    if is_next:
        s = s[5:].strip()

    for i, day_name in enumerate(_DAY_NAMES):
        if s == day_name:
            days_ahead = i - today.weekday()
            if days_ahead <= 0 or is_next:
                days_ahead += 7
            return today + timedelta(days=days_ahead)

    relative_match = re.fullmatch(r"in (\d+) (days?|weeks?)", s)
    if relative_match:
        amount = int(relative_match.group(1))
        unit = relative_match.group(2)
        delta = timedelta(weeks=amount) if unit.startswith("week") else timedelta(days=amount)
        return today + delta

    return None

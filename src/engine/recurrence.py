"""
Default recurrence evaluator.

A recurrence rule is an iCalendar RRULE body such as ``FREQ=WEEKLY`` or
``FREQ=MONTHLY;BYMONTHDAY=1``, evaluated with dateutil.
"""

from datetime import date, datetime, time
from typing import Callable, Optional

from dateutil.rrule import rrulestr

RecurrenceEvaluator = Callable[[str, date], Optional[date]]


class RecurrenceError(ValueError):
    """A recurrence rule could not be evaluated."""


def next_occurrence(rule: str, reference: date) -> Optional[date]:
    """
    Return the first occurrence of ``rule`` strictly after ``reference``.

    Returns None when the rule has no further occurrences.

    Raises:
        RecurrenceError: if the rule cannot be parsed
    """
    start = datetime.combine(reference, time())
    try:
        parsed = rrulestr(rule, dtstart=start)
    except (ValueError, TypeError) as e:
        raise RecurrenceError(f"Invalid recurrence rule {rule!r}: {e}") from e

    following = parsed.after(start, inc=False)
    return following.date() if following else None

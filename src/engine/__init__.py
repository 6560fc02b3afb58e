from .query import QueryResult, apply_filters, execute
from .recurrence import RecurrenceError, next_occurrence
from .sort import DEFAULT_SORTING, sort_tasks
from .toggle import change_priority, toggle, toggle_waiting
from .urgency import calculate_urgency

__all__ = [
    "QueryResult",
    "apply_filters",
    "execute",
    "RecurrenceError",
    "next_occurrence",
    "DEFAULT_SORTING",
    "sort_tasks",
    "change_priority",
    "toggle",
    "toggle_waiting",
    "calculate_urgency",
]

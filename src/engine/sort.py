"""
Multi-key stable sorting of tasks.

Each sort property has a natural comparator; ``SortKey.reverse`` flips it.
Keys compose in the order given and Python's stable sort keeps the input
order of tasks that tie on every key.
"""

from datetime import date
from functools import cmp_to_key
from typing import Callable, Dict, Iterable, List, Optional

from engine.urgency import calculate_urgency
from models.settings import DEFAULT_SETTINGS, Settings
from models.task import Status, Task
from parsers.query_parser import SortKey

Comparator = Callable[[Task, Task], int]

# Used when a query has no sort directive.
DEFAULT_SORTING = [
    SortKey("status"),
    SortKey("urgency"),
    SortKey("due"),
    SortKey("priority"),
    SortKey("path"),
]


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _compare_dates(a: Optional[date], b: Optional[date]) -> int:
    # Missing dates sort after present ones.
    if a is None and b is None:
        return 0
    if a is None:
        return 1
    if b is None:
        return -1
    return _cmp(a, b)


def _status_rank(task: Task) -> int:
    return 0 if task.status is Status.OPEN else 1


def _make_comparators(settings: Settings, scores: Dict[int, float]) -> Dict[str, Comparator]:
    def clean(description: str) -> str:
        if settings.global_filter:
            description = description.replace(settings.global_filter, "")
        return description.strip().lower()

    return {
        "status": lambda a, b: _cmp(_status_rank(a), _status_rank(b)),
        # Most urgent first.
        "urgency": lambda a, b: _cmp(scores[id(b)], scores[id(a)]),
        "priority": lambda a, b: _cmp(a.priority, b.priority),
        "due": lambda a, b: _compare_dates(a.due_date, b.due_date),
        "done": lambda a, b: _compare_dates(a.done_date, b.done_date),
        "path": lambda a, b: _cmp(a.path.lower(), b.path.lower()),
        "description": lambda a, b: _cmp(clean(a.description), clean(b.description)),
    }


def _reversed(comparator: Comparator) -> Comparator:
    return lambda a, b: -comparator(a, b)


def composite_comparator(comparators: List[Comparator]) -> Comparator:
    def compare(a: Task, b: Task) -> int:
        for comparator in comparators:
            result = comparator(a, b)
            if result != 0:
                return result
        return 0

    return compare


def sort_tasks(
    tasks: Iterable[Task],
    sorting: Optional[List[SortKey]] = None,
    settings: Settings = DEFAULT_SETTINGS,
    today: Optional[date] = None,
) -> List[Task]:
    """
    Stable-sort tasks by the given keys (DEFAULT_SORTING when empty).

    Urgency is evaluated once per task for the whole call.
    """
    tasks = list(tasks)
    keys = sorting or DEFAULT_SORTING
    today = today or date.today()

    scores: Dict[int, float] = {}
    if any(key.property == "urgency" for key in keys):
        scores = {id(task): calculate_urgency(task, today) for task in tasks}

    by_property = _make_comparators(settings, scores)
    comparators = [
        _reversed(by_property[key.property]) if key.reverse else by_property[key.property]
        for key in keys
    ]

    return sorted(tasks, key=cmp_to_key(composite_comparator(comparators)))

"""
Query execution: filter, then sort, then limit.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from engine.sort import sort_tasks
from models.settings import DEFAULT_SETTINGS, Settings
from models.task import Task
from parsers.query_parser import Filter, Query


@dataclass
class QueryResult:
    tasks: List[Task]
    # Number of tasks that passed the filters, before the limit.
    total_count: int

    @property
    def count(self) -> int:
        return len(self.tasks)


def apply_filters(filters: List[Filter], tasks: Iterable[Task]) -> List[Task]:
    """Keep tasks that pass every filter (logical AND)."""
    result = list(tasks)
    for task_filter in filters:
        result = [task for task in result if task_filter(task)]
    return result


def execute(
    query: Query,
    tasks: Iterable[Task],
    settings: Settings = DEFAULT_SETTINGS,
    today: Optional[date] = None,
) -> QueryResult:
    """
    Run a parsed query over a task collection.

    Raises:
        ValueError: if the query carries a parse error
    """
    if query.error is not None:
        raise ValueError(query.error)

    filtered = apply_filters(query.filters, tasks)
    ordered = sort_tasks(filtered, query.sorting, settings=settings, today=today)
    if query.limit is not None:
        ordered = ordered[: query.limit]
    return QueryResult(tasks=ordered, total_count=len(filtered))

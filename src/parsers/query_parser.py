"""
Parser for the line-oriented task query language.

Each non-blank, non-comment line is one directive: a filter, a sort key, a
limit, or a layout toggle. Parsing stops at the first directive that is not
understood and the whole query carries that error instead of results.

Example:
    not done
    due before next monday
    sort by urgency
    sort by path descending
    limit 10
    hide backlink
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional

from models.layout import LayoutOptions
from models.settings import DEFAULT_SETTINGS, Settings
from models.task import Priority, Status, Task
from utils.dates import parse_date_expression

log = logging.getLogger(__name__)

Filter = Callable[[Task], bool]

SORT_PROPERTIES = ("urgency", "status", "priority", "due", "done", "path", "description")

_NO_DUE_DATE = "no due date"
_HAS_DUE_DATE = "has due date"
_NO_DONE_DATE = "no done date"
_HAS_DONE_DATE = "has done date"
_DONE = "done"
_NOT_DONE = "not done"
_SHORT_MODE = "short mode"

_DUE_REGEX = re.compile(r"^due (before|after|on)? ?(.*)$")
_DONE_REGEX = re.compile(r"^done (before|after|on)? ?(.*)$")
_PRIORITY_REGEX = re.compile(r"^priority is (above |below )?(high|medium|none|low|waiting)$")
_INCLUDES_REGEX = re.compile(r"^(path|description|heading) (includes|does not include) (.*)$")
_SORT_REGEX = re.compile(r"^sort by (\w+)(?: (ascending|descending|reverse))?$")
_LIMIT_REGEX = re.compile(r"^limit (?:to )?(\d+)(?: tasks?)?$")
_HIDE_REGEX = re.compile(r"^hide (task count|backlinks?|priority|done date|due date|edit button)$")

_HIDE_OPTIONS = {
    "task count": "hide_task_count",
    "backlink": "hide_backlinks",
    "backlinks": "hide_backlinks",
    "priority": "hide_priority",
    "done date": "hide_done_date",
    "due date": "hide_due_date",
    "edit button": "hide_edit_button",
}


class QuerySyntaxError(ValueError):
    """A query line could not be parsed."""

    def __init__(self, line: str, message: str = "do not understand query") -> None:
        super().__init__(f"{message}: {line}")
        self.line = line
        self.message = message


@dataclass(frozen=True)
class SortKey:
    property: str
    reverse: bool = False


@dataclass
class Query:
    source: str = ""
    filters: List[Filter] = field(default_factory=list)
    sorting: List[SortKey] = field(default_factory=list)
    limit: Optional[int] = None
    layout_options: LayoutOptions = field(default_factory=LayoutOptions)
    error: Optional[str] = None


def _date_filter(line: str, field_name: str, relation: Optional[str], expression: str, today: date) -> Filter:
    target = parse_date_expression(expression, today)
    if target is None:
        raise QuerySyntaxError(line, "do not understand date")

    def compare(task: Task) -> bool:
        value = getattr(task, field_name)
        if value is None:
            return False
        if relation == "before":
            return value < target
        if relation == "after":
            return value > target
        return value == target

    return compare


def _priority_filter(modifier: Optional[str], level: str) -> Filter:
    target = Priority[level.upper()]
    modifier = (modifier or "").strip()
    # Lower enum values mean higher priority.
    if modifier == "above":
        return lambda task: task.priority < target
    if modifier == "below":
        return lambda task: task.priority > target
    return lambda task: task.priority == target


def _includes_filter(prop: str, operator: str, value: str, settings: Settings) -> Filter:
    needle = value.strip().lower()

    def text_of(task: Task) -> str:
        if prop == "path":
            return task.path
        if prop == "heading":
            return task.preceding_header or ""
        description = task.description
        if settings.global_filter:
            description = description.replace(settings.global_filter, "").strip()
        return description

    if operator == "includes":
        return lambda task: needle in text_of(task).lower()
    return lambda task: needle not in text_of(task).lower()


def _parse_line(query: Query, line: str, settings: Settings, today: date) -> None:
    """Parse one directive into ``query``. Raises QuerySyntaxError."""
    lowered = line.lower()

    if lowered == _DONE:
        query.filters.append(lambda task: task.status is Status.DONE)
        return
    if lowered == _NOT_DONE:
        query.filters.append(lambda task: task.status is Status.OPEN)
        return
    if lowered == _NO_DUE_DATE:
        query.filters.append(lambda task: task.due_date is None)
        return
    if lowered == _HAS_DUE_DATE:
        query.filters.append(lambda task: task.due_date is not None)
        return
    if lowered == _NO_DONE_DATE:
        query.filters.append(lambda task: task.done_date is None)
        return
    if lowered == _HAS_DONE_DATE:
        query.filters.append(lambda task: task.done_date is not None)
        return
    if lowered == _SHORT_MODE:
        query.layout_options.short_mode = True
        return

    m = _DUE_REGEX.match(lowered)
    if m:
        query.filters.append(_date_filter(line, "due_date", m.group(1), m.group(2), today))
        return

    m = _DONE_REGEX.match(lowered)
    if m:
        query.filters.append(_date_filter(line, "done_date", m.group(1), m.group(2), today))
        return

    m = _PRIORITY_REGEX.match(lowered)
    if m:
        query.filters.append(_priority_filter(m.group(1), m.group(2)))
        return

    m = _INCLUDES_REGEX.match(lowered)
    if m:
        query.filters.append(_includes_filter(m.group(1), m.group(2), m.group(3), settings))
        return

    m = _SORT_REGEX.match(lowered)
    if m:
        prop = m.group(1)
        if prop not in SORT_PROPERTIES:
            raise QuerySyntaxError(line, "do not understand query sorting")
        query.sorting.append(SortKey(property=prop, reverse=m.group(2) in ("descending", "reverse")))
        return
    if lowered.startswith("sort by"):
        raise QuerySyntaxError(line, "do not understand query sorting")

    m = _LIMIT_REGEX.match(lowered)
    if m:
        limit = int(m.group(1))
        if limit <= 0:
            raise QuerySyntaxError(line, "limit must be a positive number")
        query.limit = limit
        return
    if lowered.startswith("limit"):
        raise QuerySyntaxError(line, "do not understand query limit")

    m = _HIDE_REGEX.match(lowered)
    if m:
        setattr(query.layout_options, _HIDE_OPTIONS[m.group(1)], True)
        return

    raise QuerySyntaxError(line)


def parse_query(
    source: str,
    settings: Settings = DEFAULT_SETTINGS,
    today: Optional[date] = None,
) -> Query:
    """
    Parse query text into a Query.

    Never raises: on the first bad line the returned query has ``error`` set
    and no further lines are read. Relative dates resolve against ``today``
    (default: the current date), so re-parse to refresh them.
    """
    today = today or date.today()
    query = Query(source=source)

    for raw_line in source.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            _parse_line(query, line, settings, today)
        except QuerySyntaxError as e:
            log.debug("Query parse error: %s", e)
            query.error = str(e)
            break

    return query

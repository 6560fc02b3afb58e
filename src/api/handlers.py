"""Task handler functions shared by MCP tools and REST API."""

import logging
from datetime import date
from typing import List, Optional

from cache.vault_cache import CacheState
from engine.query import execute
from engine.toggle import change_priority, toggle, toggle_waiting
from engine.urgency import calculate_urgency
from models.layout import LayoutOptions
from models.settings import DEFAULT_SETTINGS, Settings
from models.task import OriginKey, Task
from parsers.query_parser import parse_query
from utils.dates import format_date
from utils.formatting import link_text, to_display_string, to_source_line

log = logging.getLogger(__name__)


def _task_to_dict(
    task: Task,
    layout: Optional[LayoutOptions] = None,
    settings: Settings = DEFAULT_SETTINGS,
    today: Optional[date] = None,
) -> dict:
    """
    Serialize a Task to a JSON-serializable dict.

    Urgency is scored against ``today``, the same day the query sorted by.
    """
    layout = layout or LayoutOptions()
    today = today or date.today()
    d = {
        "ref": task.origin.ref,
        "path": task.origin.path,
        "section_start": task.origin.section_start,
        "section_index": task.origin.section_index,
        "status": task.status.value,
        "status_character": task.original_status_character,
        "description": task.description,
        "priority": task.priority.name.lower(),
        "due": format_date(task.due_date) if task.due_date else None,
        "done": format_date(task.done_date) if task.done_date else None,
        "recurrence": task.recurrence,
        "block_link": task.block_link or None,
        "heading": task.preceding_header,
        "urgency": round(calculate_urgency(task, today), 3),
        "text": to_display_string(task, layout, settings),
        "line": to_source_line(task),
    }
    if not layout.hide_backlinks:
        d["link_text"] = link_text(task)
    return d


def _lookup(cache, path: str, section_start: int, section_index: int) -> Optional[Task]:
    return cache.find_task(OriginKey(path=path, section_start=section_start, section_index=section_index))


def _not_found(path: str, section_start: int, section_index: int) -> dict:
    return {"error": f"Task '{path}:{section_start}:{section_index}' not found"}


def _replace(cache, original: Task, new_tasks: List[Task]) -> dict:
    if not cache.replace_task(original, new_tasks):
        return {"error": f"Task '{original.origin.ref}' could not be written back"}
    log.info("Replaced task %s with %d task(s)", original.origin.ref, len(new_tasks))
    return {
        "replaced": original.origin.ref,
        "tasks": [_task_to_dict(t, settings=cache.settings) for t in new_tasks],
    }


def handle_query(cache, *, query: str) -> dict:
    """Parse and run a query against the current snapshot."""
    today = date.today()
    parsed = parse_query(query, cache.settings, today=today)
    if parsed.error is not None:
        return {"error": f"Tasks query: {parsed.error}"}

    tasks = cache.snapshot()
    if cache.state is not CacheState.WARM:
        return {"error": "Loading Tasks ..."}

    result = execute(parsed, tasks, cache.settings, today=today)
    layout = parsed.layout_options
    response = {
        "tasks": [_task_to_dict(t, layout, cache.settings, today) for t in result.tasks],
        "layout": layout.to_dict(),
    }
    if not layout.hide_task_count:
        response["count"] = result.count
    return response


def handle_task_toggle(cache, *, path: str, section_start: int, section_index: int) -> dict:
    task = _lookup(cache, path, section_start, section_index)
    if task is None:
        return _not_found(path, section_start, section_index)
    return _replace(cache, task, toggle(task))


def handle_task_priority(
    cache,
    *,
    path: str,
    section_start: int,
    section_index: int,
    increase: bool = True,
) -> dict:
    task = _lookup(cache, path, section_start, section_index)
    if task is None:
        return _not_found(path, section_start, section_index)
    return _replace(cache, task, [change_priority(task, increase=increase)])


def handle_task_waiting(cache, *, path: str, section_start: int, section_index: int) -> dict:
    task = _lookup(cache, path, section_start, section_index)
    if task is None:
        return _not_found(path, section_start, section_index)
    return _replace(cache, task, [toggle_waiting(task)])


def handle_cache_status(cache) -> dict:
    return cache.status()

"""
Task state transitions.

Every transition returns brand-new Task values; callers hand the result to a
write collaborator (parsers.task_parser.replace_task_with_tasks) which
substitutes them for the original line.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import List, Optional

from engine.recurrence import RecurrenceError, RecurrenceEvaluator, next_occurrence
from models.task import Priority, Status, Task
from utils.formatting import DONE_CHARACTER, OPEN_CHARACTER

log = logging.getLogger(__name__)

# Priority ladder used by change_priority, highest first.
_PRIORITY_LADDER = [Priority.HIGH, Priority.MEDIUM, Priority.NONE, Priority.LOW]


def _next_occurrence_task(
    task: Task,
    today: date,
    evaluator: RecurrenceEvaluator,
) -> Optional[Task]:
    reference = task.due_date or today
    try:
        next_date = evaluator(task.recurrence, reference)
    except RecurrenceError as e:
        log.warning("Could not compute next occurrence for %s: %s", task.origin.ref, e)
        return None
    except Exception:
        # A failing evaluator must not block completing the task.
        log.exception("Recurrence evaluator failed for %s", task.origin.ref)
        return None

    if next_date is None:
        log.warning("Recurrence %r has no occurrence after %s", task.recurrence, reference)
        return None

    return replace(
        task,
        status=Status.OPEN,
        due_date=next_date,
        done_date=None,
        original_status_character=OPEN_CHARACTER,
    )


def toggle(
    task: Task,
    *,
    today: Optional[date] = None,
    evaluator: RecurrenceEvaluator = next_occurrence,
) -> List[Task]:
    """
    Toggle a task and return the resulting tasks.

    A recurring task that gets completed yields ``[next, toggled]``, with the
    next occurrence first. Otherwise the result is ``[toggled]``.
    """
    today = today or date.today()

    if task.status is Status.OPEN:
        toggled = replace(
            task,
            status=Status.DONE,
            done_date=today,
            original_status_character=DONE_CHARACTER,
        )
    else:
        toggled = replace(
            task,
            status=Status.OPEN,
            done_date=None,
            original_status_character=OPEN_CHARACTER,
        )

    if toggled.status is Status.DONE and task.recurrence:
        upcoming = _next_occurrence_task(task, today, evaluator)
        if upcoming is not None:
            return [upcoming, toggled]

    return [toggled]


def change_priority(task: Task, increase: bool = True) -> Task:
    """
    Move one step along High > Medium > None > Low, clamped at both ends.

    Waiting tasks drop back to None.
    """
    if task.priority is Priority.WAITING:
        return replace(task, priority=Priority.NONE)

    index = _PRIORITY_LADDER.index(task.priority)
    index = max(index - 1, 0) if increase else min(index + 1, len(_PRIORITY_LADDER) - 1)
    return replace(task, priority=_PRIORITY_LADDER[index])


def toggle_waiting(task: Task) -> Task:
    """Defer a task, or bring a waiting task back as High priority."""
    if task.priority is Priority.WAITING:
        return replace(task, priority=Priority.HIGH)
    return replace(task, priority=Priority.WAITING)

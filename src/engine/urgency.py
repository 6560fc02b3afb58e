"""
Urgency scoring.

urgency = due component + priority component, except that done tasks always
score DONE_URGENCY. Scores are monotone in each input: a nearer due date, a
higher priority or an open status never lowers the score.
"""

from datetime import date
from typing import Dict, Optional

from models.task import Priority, Status, Task

DUE_COEFFICIENT = 12.0
DONE_URGENCY = -100.0
NO_DUE_DATE_URGENCY = 0.0

PRIORITY_URGENCY: Dict[Priority, float] = {
    Priority.HIGH: 6.0,
    Priority.MEDIUM: 3.9,
    Priority.NONE: 1.95,
    Priority.LOW: 0.0,
    Priority.WAITING: -6.0,
}


def due_multiplier(due: date, today: date) -> float:
    """Scale from 0.2 (two weeks or more away) up to 1.0 (a week or more overdue)."""
    days_overdue = (today - due).days
    if days_overdue >= 7:
        return 1.0
    if days_overdue >= -14:
        return ((days_overdue + 14) * 0.8) / 21 + 0.2
    return 0.2


def calculate_urgency(task: Task, today: Optional[date] = None) -> float:
    if task.status is Status.DONE:
        return DONE_URGENCY

    today = today or date.today()
    urgency = NO_DUE_DATE_URGENCY
    if task.due_date is not None:
        urgency = due_multiplier(task.due_date, today) * DUE_COEFFICIENT

    return urgency + PRIORITY_URGENCY[task.priority]

"""
Canonical task formatting.

This module is the single source of truth for how a Task is rendered back to
markdown. The field order is fixed regardless of the order the tokens had in
the source line:

    <description> [priority] [🔁 rule] [📅 due] [✅ done] [ ^block-link]
"""

from typing import Dict, Optional

from models.layout import LayoutOptions
from models.settings import DEFAULT_SETTINGS, Settings
from models.task import Priority, Task
from utils.dates import format_date

PRIORITY_TO_GLYPH: Dict[Priority, str] = {
    Priority.HIGH: "!!",
    Priority.MEDIUM: "!?",
    Priority.LOW: "??",
    Priority.WAITING: ">>",
}

GLYPH_TO_PRIORITY: Dict[str, Priority] = {v: k for k, v in PRIORITY_TO_GLYPH.items()}

DUE_SIGNIFIER = "📅"
DONE_SIGNIFIER = "✅"
RECURRENCE_SIGNIFIER = "🔁"

DONE_CHARACTER = "x"
OPEN_CHARACTER = " "


def to_string(task: Task, layout: Optional[LayoutOptions] = None) -> str:
    """Render a task's description and metadata (no checkbox) in canonical order."""
    layout = layout or LayoutOptions()
    parts = [task.description]

    if not layout.hide_priority and task.priority in PRIORITY_TO_GLYPH:
        parts.append(PRIORITY_TO_GLYPH[task.priority])

    if task.recurrence:
        parts.append(RECURRENCE_SIGNIFIER if layout.short_mode else f"{RECURRENCE_SIGNIFIER} {task.recurrence}")

    if not layout.hide_due_date and task.due_date:
        parts.append(DUE_SIGNIFIER if layout.short_mode else f"{DUE_SIGNIFIER} {format_date(task.due_date)}")

    if not layout.hide_done_date and task.done_date:
        parts.append(DONE_SIGNIFIER if layout.short_mode else f"{DONE_SIGNIFIER} {format_date(task.done_date)}")

    if task.block_link:
        parts.append(task.block_link)

    return " ".join(parts)


def to_source_line(task: Task) -> str:
    """Render a task as the full markdown line written back to a document."""
    return f"{task.indentation}- [{task.original_status_character}] {to_string(task)}"


def to_display_string(
    task: Task,
    layout: Optional[LayoutOptions] = None,
    settings: Settings = DEFAULT_SETTINGS,
) -> str:
    """Render a task for a query result, optionally hiding the global filter."""
    text = to_string(task, layout)
    if settings.remove_global_filter and settings.global_filter:
        text = text.replace(settings.global_filter, "", 1).strip()
    return text


def link_text(task: Task) -> Optional[str]:
    """Backlink label: "<file>" or "<file> > <heading>"."""
    text = task.filename
    if text is None:
        return None
    if task.preceding_header is not None and task.preceding_header != text:
        text = f"{text} > {task.preceding_header}"
    return text

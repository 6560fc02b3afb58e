"""
Parser for markdown task lines.

Main API:
    parse_line(line, origin, preceding_header, settings)  → Task | None
    parse_content(content, path, settings)                → List[Task]
    parse_file(path, settings)                            → List[Task]
    replace_task_with_tasks(original, new_tasks, settings) → bool

Metadata tokens sit at the end of the line and may appear in any relative
order. They are peeled off the tail one at a time; formatting.py always
writes them back in canonical order.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from models.settings import DEFAULT_SETTINGS, Settings
from models.task import OriginKey, Priority, Status, Task
from utils.dates import parse_iso_date
from utils.formatting import GLYPH_TO_PRIORITY, to_source_line

log = logging.getLogger(__name__)

TASK_REGEX = re.compile(r"^([\s\t]*)[-*] +\[(.)\] *(.*)")
BLOCK_LINK_REGEX = re.compile(r" \^[a-zA-Z0-9-]+$")

# Each pattern is anchored at the end: tokens are matched and removed from
# the tail until none are left.
PRIORITY_REGEX = re.compile(r"(!!|!\?|\?\?|>>)$")
DONE_DATE_REGEX = re.compile(r"✅ ?(\d{4}-\d{2}-\d{2})$")
DUE_DATE_REGEX = re.compile(r"[📅📆🗓]\ufe0f? ?(\d{4}-\d{2}-\d{2})$")
RECURRENCE_REGEX = re.compile(r"🔁 ?(\S+)$")

# Upper bound on strip passes so adversarial input cannot loop forever.
MAX_STRIP_PASSES = 7

_HEADING_REGEX = re.compile(r"^(#{1,6})\s+(.*)$")


@dataclass
class SuffixFields:
    """Metadata collected while stripping suffix tokens."""

    priority: Priority = Priority.NONE
    due_date: Optional[date] = None
    done_date: Optional[date] = None
    recurrence: Optional[str] = None


def _set_priority(fields: SuffixFields, value: str) -> None:
    fields.priority = GLYPH_TO_PRIORITY[value]


def _set_done_date(fields: SuffixFields, value: str) -> None:
    fields.done_date = parse_iso_date(value)


def _set_due_date(fields: SuffixFields, value: str) -> None:
    fields.due_date = parse_iso_date(value)


def _set_recurrence(fields: SuffixFields, value: str) -> None:
    fields.recurrence = value


_SUFFIX_HANDLERS: List[Tuple[re.Pattern, Callable[[SuffixFields, str], None]]] = [
    (PRIORITY_REGEX, _set_priority),
    (DONE_DATE_REGEX, _set_done_date),
    (DUE_DATE_REGEX, _set_due_date),
    (RECURRENCE_REGEX, _set_recurrence),
]


def strip_suffixes(body: str) -> Tuple[str, SuffixFields]:
    """
    Remove trailing metadata tokens from a task body.

    Every pass tries the handlers in order; the first match is applied and
    removed, then scanning restarts from the first handler. A later match
    overwrites an earlier one, so with duplicate tokens the leftmost wins.

    Returns:
        (description, fields)
    """
    fields = SuffixFields()
    description = body.strip()

    for _ in range(MAX_STRIP_PASSES):
        for pattern, handler in _SUFFIX_HANDLERS:
            m = pattern.search(description)
            if m:
                handler(fields, m.group(1))
                description = description[: m.start()].strip()
                break
        else:
            return description, fields

    log.debug("Strip pass limit reached, keeping remainder as description: %r", description)
    return description, fields


def parse_line(
    line: str,
    origin: Optional[OriginKey] = None,
    preceding_header: Optional[str] = None,
    settings: Settings = DEFAULT_SETTINGS,
) -> Optional[Task]:
    """Return a Task, or None if the line is not a task."""
    m = TASK_REGEX.match(line)
    if not m:
        return None

    indentation = m.group(1)
    status_char = m.group(2)
    # Binary classification: anything other than a space is done.
    status = Status.OPEN if status_char.lower() == " " else Status.DONE

    body = m.group(3).strip()
    if settings.global_filter not in body:
        return None

    block_link = ""
    block_match = BLOCK_LINK_REGEX.search(body)
    if block_match:
        block_link = block_match.group().strip()
        body = body[: block_match.start()].strip()

    description, fields = strip_suffixes(body)

    return Task(
        status=status,
        description=description,
        origin=origin or OriginKey(),
        preceding_header=preceding_header,
        priority=fields.priority,
        due_date=fields.due_date,
        # Open tasks never carry a done date.
        done_date=fields.done_date if status is Status.DONE else None,
        recurrence=fields.recurrence,
        block_link=block_link,
        indentation=indentation,
        original_status_character=status_char,
    )


def _parse_heading(stripped: str) -> Optional[str]:
    m = _HEADING_REGEX.match(stripped)
    return m.group(2).strip() if m else None


def _iter_tasks(lines: List[str], path: str, settings: Settings):
    """Yield (line_index, task) for every task in a document."""
    section_start = 0
    section_index = 0
    header: Optional[str] = None
    in_code_block = False

    for line_num, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("```"):
            in_code_block = not in_code_block
            continue
        if in_code_block:
            continue

        heading = _parse_heading(stripped)
        if heading is not None:
            header = heading
            section_start = line_num
            section_index = 0
            continue

        origin = OriginKey(path=path, section_start=section_start, section_index=section_index)
        task = parse_line(line, origin=origin, preceding_header=header, settings=settings)
        if task is None:
            continue
        section_index += 1
        yield line_num, task


def parse_content(content: str, path: str = "", settings: Settings = DEFAULT_SETTINGS) -> List[Task]:
    """
    Parse all tasks in a markdown document.

    Args:
        content: Full file content
        path: Source path recorded in each task's origin key
        settings: Global filter settings

    Returns:
        Tasks in document order
    """
    return [task for _, task in _iter_tasks(content.split("\n"), path, settings)]


def _read_document(file_path: Path) -> str:
    # newline="" keeps "\r\n" intact so line numbers match what is written back.
    with file_path.open(encoding="utf-8", newline="") as f:
        return f.read()


def parse_file(file_path: Path, settings: Settings = DEFAULT_SETTINGS) -> List[Task]:
    """Parse a markdown file into a list of tasks."""
    return parse_content(_read_document(file_path), file_path.as_posix(), settings)


def replace_task_with_tasks(
    original: Task,
    new_tasks: List[Task],
    settings: Settings = DEFAULT_SETTINGS,
) -> bool:
    """
    Replace the line holding ``original`` with the serialized ``new_tasks``.

    The task is located by its section start and index, then checked to still
    describe the same task before writing.

    Returns:
        True if the file was rewritten, False if the task could not be located
    """
    file_path = Path(original.origin.path)
    if not file_path.is_file():
        log.warning("Cannot replace task, file not found: %s", file_path)
        return False

    lines = _read_document(file_path).split("\n")

    for line_num, task in _iter_tasks(lines, original.origin.path, settings):
        if (task.origin.section_start, task.origin.section_index) != (
            original.origin.section_start,
            original.origin.section_index,
        ):
            continue
        if task.description != original.description:
            log.warning(
                "Task at %s changed on disk (%r != %r), not replacing",
                original.origin.ref,
                task.description,
                original.description,
            )
            return False
        ending = "\r" if lines[line_num].endswith("\r") else ""
        lines[line_num : line_num + 1] = [to_source_line(t) + ending for t in new_tasks]
        with file_path.open("w", encoding="utf-8", newline="") as f:
            f.write("\n".join(lines))
        return True

    log.warning("Task %s not found in %s", original.origin.ref, file_path)
    return False

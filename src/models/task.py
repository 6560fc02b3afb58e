"""
Core task data model.

A Task is an immutable value parsed from a single markdown checklist line.
The model captures everything needed to reconstruct the line via
utils.formatting; transitions build new instances with dataclasses.replace
instead of mutating.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum
from functools import cached_property
from typing import Optional


class Status(str, Enum):
    OPEN = "open"
    DONE = "done"


class Priority(IntEnum):
    """Task priority. Lower values sort first; Low sorts below None."""

    HIGH = 1
    MEDIUM = 2
    NONE = 3
    LOW = 4
    WAITING = 5


@dataclass(frozen=True)
class OriginKey:
    """
    Locator of a task inside the vault.

    ``section_start`` is the line index of the heading that opens the task's
    section (0 when there is none) and ``section_index`` is the ordinal of the
    task within that section. Only host-side collaborators interpret it.
    """

    path: str = ""
    section_start: int = 0
    section_index: int = 0

    @property
    def ref(self) -> str:
        return f"{self.path}:{self.section_start}:{self.section_index}"


@dataclass(frozen=True)
class Task:
    """A single task parsed from a markdown line."""

    status: Status
    description: str
    origin: OriginKey = field(default_factory=OriginKey)
    preceding_header: Optional[str] = None
    priority: Priority = Priority.NONE
    due_date: Optional[date] = None
    done_date: Optional[date] = None
    recurrence: Optional[str] = None
    # The "^" anchor after the dates, without the leading space.
    block_link: str = ""
    indentation: str = ""
    original_status_character: str = " "

    @property
    def path(self) -> str:
        return self.origin.path

    @property
    def is_done(self) -> bool:
        return self.status is Status.DONE

    @property
    def filename(self) -> Optional[str]:
        """File name of the origin path without the .md extension."""
        m = re.search(r"([^/]+)\.md$", self.origin.path)
        return m.group(1) if m else None

    @cached_property
    def urgency(self) -> float:
        """Urgency score against today's date, computed once per instance."""
        from engine.urgency import calculate_urgency

        return calculate_urgency(self)

"""
Parser settings supplied by the host.

The core never reads settings from a global; callers pass a Settings value
into the parser and the renderer explicitly.
"""

import os
from dataclasses import dataclass
from typing import Set


@dataclass(frozen=True)
class Settings:
    """
    Attributes:
        global_filter: Substring a checklist item must contain to count as a
            task. The empty string accepts every checklist item.
        remove_global_filter: Strip the global filter from rendered output.
    """

    global_filter: str = ""
    remove_global_filter: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from TASKS_GLOBAL_FILTER / TASKS_REMOVE_GLOBAL_FILTER."""
        remove = os.environ.get("TASKS_REMOVE_GLOBAL_FILTER", "false")
        return cls(
            global_filter=os.environ.get("TASKS_GLOBAL_FILTER", ""),
            remove_global_filter=remove.lower() in ("true", "1", "yes"),
        )


DEFAULT_SETTINGS = Settings()

DEFAULT_EXCLUDE_DIRS = ".git,.obsidian,node_modules,.trash"


def parse_exclude_dirs(raw: str) -> Set[str]:
    """Parse a comma-separated list of directory names to exclude."""
    return {part.strip() for part in raw.split(",") if part.strip()}

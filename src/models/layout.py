"""Rendering switches set by query `hide ...` / `short mode` directives."""

from dataclasses import asdict, dataclass


@dataclass
class LayoutOptions:
    hide_task_count: bool = False
    hide_backlinks: bool = False
    hide_priority: bool = False
    hide_done_date: bool = False
    hide_due_date: bool = False
    hide_edit_button: bool = False
    short_mode: bool = False

    def to_dict(self) -> dict:
        return asdict(self)

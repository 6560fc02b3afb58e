from .task import OriginKey, Priority, Status, Task
from .layout import LayoutOptions
from .settings import DEFAULT_SETTINGS, Settings

__all__ = [
    "OriginKey",
    "Priority",
    "Status",
    "Task",
    "LayoutOptions",
    "DEFAULT_SETTINGS",
    "Settings",
]

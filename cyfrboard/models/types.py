# cyfrboard type definitions
# Rev 0.2.0

from __future__ import annotations
from typing import Literal

# Board lanes, in display order. Any other stored value is shown in "todo".
TaskStatus = Literal["todo", "in_progress", "done"]
STATUS_ORDER: tuple[str, ...] = ("todo", "in_progress", "done")
STATUS_LABELS = {
    "todo": "To Do",
    "in_progress": "In Progress",
    "done": "Done",
}
DEFAULT_STATUS = "todo"

TaskPriority = Literal["low", "normal", "high"]
PRIORITY_ORDER: tuple[str, ...] = ("low", "normal", "high")
PRIORITY_LABELS = {"low": "Low", "normal": "Normal", "high": "High"}
DEFAULT_PRIORITY = "normal"

OWNER_ROLE = "owner"


def coerce_status(status: str | None) -> str:
    """Lane key for a stored status; the stored value itself is never rewritten."""
    return status if status in STATUS_ORDER else DEFAULT_STATUS

# Rev 0.2.0

"""Board rules (Rev 0.2.0)
Pure functions over task collections; view models own the state, these only
compute the next value.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Sequence, Tuple

from cyfrboard.models.entities import Task
from cyfrboard.models.types import STATUS_ORDER, coerce_status

Lanes = Dict[str, List[Task]]


def group_by_status(tasks: Iterable[Task]) -> Lanes:
    """Partition tasks into the canonical lanes, keeping collection order inside each lane."""
    lanes: Lanes = {key: [] for key in STATUS_ORDER}
    for task in tasks:
        lanes[coerce_status(task.status)].append(task)
    return lanes


def is_lane_change(task: Task, new_status: str) -> bool:
    if new_status not in STATUS_ORDER:
        raise ValueError(f"Unknown status lane: {new_status!r}")
    return coerce_status(task.status) != new_status


def find_task(tasks: Sequence[Task], task_id: str) -> Task | None:
    for t in tasks:
        if t.id == task_id:
            return t
    return None


def _replace_one(tasks: Sequence[Task], task_id: str, fn) -> Tuple[Task, ...]:
    return tuple(fn(t) if t.id == task_id else t for t in tasks)


def with_status(tasks: Sequence[Task], task_id: str, status: str) -> Tuple[Task, ...]:
    return _replace_one(tasks, task_id, lambda t: replace(t, status=status))


def with_assignee(tasks: Sequence[Task], task_id: str, user_id: str, present: bool) -> Tuple[Task, ...]:
    fn = add_assignee if present else remove_assignee
    return _replace_one(tasks, task_id, lambda t: replace(t, assignees=fn(t.assignees, user_id)))


def without_task(tasks: Sequence[Task], task_id: str) -> Tuple[Task, ...]:
    return tuple(t for t in tasks if t.id != task_id)


def add_assignee(assignees: Sequence[str], user_id: str) -> Tuple[str, ...]:
    if user_id in assignees:
        return tuple(assignees)
    return (*assignees, user_id)


def remove_assignee(assignees: Sequence[str], user_id: str) -> Tuple[str, ...]:
    return tuple(a for a in assignees if a != user_id)


def dedupe(ids: Iterable[str]) -> List[str]:
    out: List[str] = []
    for i in ids:
        if i not in out:
            out.append(i)
    return out

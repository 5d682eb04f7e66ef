"""Board state machine: todo <-> in_progress <-> done, one step at a time."""

from __future__ import annotations

from ..core.enums import TaskStatus
from ..core.exceptions import ValidationError

STATUS_ORDER: tuple[TaskStatus, ...] = (TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.DONE)

TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.TODO: frozenset({TaskStatus.IN_PROGRESS}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.TODO, TaskStatus.DONE}),
    TaskStatus.DONE: frozenset({TaskStatus.IN_PROGRESS}),
}

LEFT = "left"
RIGHT = "right"


def parse_status(value) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValidationError("Invalid status")


def can_transition(current: TaskStatus, target: TaskStatus) -> bool:
    return target in TRANSITIONS[current]


def ensure_transition(current: TaskStatus, target: TaskStatus) -> None:
    if current != target and not can_transition(current, target):
        raise ValidationError(f"Cannot move a task from {current.value} to {target.value}")


def step(current: TaskStatus, direction: str) -> TaskStatus:
    """Status one column to the left or right of ``current``."""
    if direction not in (LEFT, RIGHT):
        raise ValidationError("direction must be 'left' or 'right'")
    idx = STATUS_ORDER.index(current) + (1 if direction == RIGHT else -1)
    if idx < 0 or idx >= len(STATUS_ORDER):
        raise ValidationError(f"Task is already in the {'last' if direction == RIGHT else 'first'} column")
    return STATUS_ORDER[idx]

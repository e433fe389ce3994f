# src/taskpolicy/core/errors.py

from __future__ import annotations


class TaskError(Exception):
    """Base class for errors raised by taskpolicy itself (not by task bodies)."""


class CancellationError(TaskError):
    """
    A cancelled task instance was resumed, or someone awaited a cancelled instance.

    Cancellation is a normal, recoverable outcome. It is recorded by the scheduler
    like any other result and never escalates further.
    """

    def __init__(self, instance_name: str | None = None) -> None:
        self.instance_name = instance_name
        msg = "task cancelled" if not instance_name else f"task cancelled: {instance_name}"
        super().__init__(msg)


class TaskStateError(TaskError, RuntimeError):
    """Illegal lifecycle operation on a task instance (e.g. perform() twice)."""

"""Cancellable, resumable asyncio tasks governed by a concurrency policy."""

from .core.errors import CancellationError, TaskError, TaskStateError
from .core.ports import TaskBody
from .tasks.delay import timeout
from .tasks.task_api import make_task
from .tasks.task_instance import TaskInstance
from .tasks.task_models import (
    Done,
    GeneratorBody,
    InstanceState,
    Suspend,
    TaskOptions,
    TaskPolicy,
    as_task_body,
)
from .tasks.task_scheduler import TaskScheduler

__all__ = [
    "CancellationError",
    "Done",
    "GeneratorBody",
    "InstanceState",
    "Suspend",
    "TaskBody",
    "TaskError",
    "TaskInstance",
    "TaskOptions",
    "TaskPolicy",
    "TaskScheduler",
    "TaskStateError",
    "as_task_body",
    "make_task",
    "timeout",
]

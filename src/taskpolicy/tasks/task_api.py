# src/taskpolicy/tasks/task_api.py

from __future__ import annotations

import logging
from typing import Any

from ..core.ports import BodyFactory
from .task_instance import _NO_CONTEXT
from .task_models import TaskOptions, TaskPolicy
from .task_scheduler import TaskScheduler

logger = logging.getLogger(__name__)


def make_task(
    body: BodyFactory,
    options: TaskOptions | None = None,
    *,
    policy: TaskPolicy | str | None = None,
    debounce_seconds: float | None = None,
    context: Any = _NO_CONTEXT,
    name: str | None = None,
) -> TaskScheduler[Any]:
    """
    Convenience helper: wrap a body factory into a callable scheduler.

    `body` is a generator function (or any callable returning a TaskBody).
    Pass either a ready TaskOptions or the individual policy/debounce keywords.
    With `context`, the body is called as body(context, *args), e.g.:

        class Search:
            def __init__(self) -> None:
                self.perform = make_task(Search._perform, policy="restartable", context=self)

            def _perform(self, query):
                rows = yield fetch(query)
                return rows
    """
    if options is None:
        options = TaskOptions(policy=TaskPolicy.parse(policy), debounce_seconds=debounce_seconds)
    elif policy is not None or debounce_seconds is not None:
        raise TypeError("make_task() takes either options or policy/debounce_seconds, not both")

    scheduler: TaskScheduler[Any] = TaskScheduler(body, options, context=context, name=name)
    logger.debug(
        "Created task %s (policy=%s debounce=%s)",
        scheduler.name,
        options.policy.value,
        options.debounce_seconds,
    )
    return scheduler

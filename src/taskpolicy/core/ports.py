# src/taskpolicy/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task engine.

The engine depends on Protocols instead of concrete implementations:
- a task body is anything with advance(sent) -> Suspend | Done,
- a body factory is any callable producing such a body (or a generator).
"""

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..tasks.task_models import Done, Suspend


@runtime_checkable
class TaskBody(Protocol):
    """
    Resumable computation driven by a TaskInstance.

    advance() receives the result of the previously awaited sub-operation
    (or the plain value the body yielded; None on the first call) and returns
    either Suspend(value) or Done(value). Raising from advance() fails the task.

    Bodies may also provide close(); it is called when the instance stops
    advancing the body before it is done.
    """

    def advance(self, sent: Any) -> Suspend | Done: ...


# factory(*args, **kwargs) or factory(context, *args, **kwargs) when a context is bound.
BodyFactory = Callable[..., Any]

# Delay primitive used for debounce: seconds -> awaitable.
DelayFn = Callable[[float], Awaitable[None]]

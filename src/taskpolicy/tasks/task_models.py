# src/taskpolicy/tasks/task_models.py

from __future__ import annotations

import inspect
import re
from collections.abc import Generator
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..core.ports import TaskBody


class InstanceState(StrEnum):
    """
    TaskInstance lifecycle state.

    idle -> running -> finished
    idle|running -> cancelled
    idle|running -> dropped
    """

    IDLE = "idle"
    RUNNING = "running"
    DROPPED = "dropped"
    CANCELLED = "cancelled"
    FINISHED = "finished"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset({InstanceState.DROPPED, InstanceState.CANCELLED, InstanceState.FINISHED})


class TaskPolicy(StrEnum):
    """What a scheduler does when the task is invoked while a previous call is pending."""

    CONCURRENT = "concurrent"
    DROP = "drop"
    KEEP_LAST = "keep_last"
    RESTARTABLE = "restartable"
    QUEUE = "queue"

    @classmethod
    def parse(cls, raw: str | TaskPolicy | None) -> TaskPolicy:
        """
        Parse a policy name.

        Accepts "keep_last", "keep-last", "keepLast", "KEEP_LAST" and the
        "restart" alias. None/empty -> CONCURRENT. Unknown names raise ValueError.
        """
        if isinstance(raw, TaskPolicy):
            return raw
        if raw is None or not str(raw).strip():
            return cls.CONCURRENT

        key = re.sub(r"(?<=[a-z])(?=[A-Z])", "_", str(raw).strip())
        key = key.replace("-", "_").lower()
        key = _POLICY_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown task policy: {raw!r}") from None


_POLICY_ALIASES = {
    "restart": "restartable",
    "keeplast": "keep_last",
}


@dataclass(slots=True, frozen=True)
class TaskOptions:
    """Scheduler configuration: policy + optional debounce delay (seconds)."""

    policy: TaskPolicy = TaskPolicy.CONCURRENT
    debounce_seconds: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "policy", TaskPolicy.parse(self.policy))
        if self.debounce_seconds is not None:
            delay = float(self.debounce_seconds)
            if delay < 0:
                raise ValueError(f"debounce_seconds must be non-negative, got {self.debounce_seconds!r}")
            object.__setattr__(self, "debounce_seconds", delay or None)

    @classmethod
    def from_settings(cls, settings) -> TaskOptions:
        return cls(
            policy=getattr(settings, "default_policy", TaskPolicy.CONCURRENT),
            debounce_seconds=getattr(settings, "default_debounce_seconds", None),
        )


@dataclass(slots=True, frozen=True)
class Suspend:
    """Body paused on `value`: an awaitable sub-operation or a plain value."""

    value: Any = None


@dataclass(slots=True, frozen=True)
class Done:
    """Body finished with its return value."""

    value: Any = None


class GeneratorBody:
    """
    Adapts a generator to the TaskBody protocol.

    Every `yield x` becomes Suspend(x); the value sent back into the generator is
    the settled result of x. `return v` becomes Done(v).
    """

    def __init__(self, generator: Generator[Any, Any, Any]) -> None:
        self._generator = generator

    def advance(self, sent: Any) -> Suspend | Done:
        try:
            return Suspend(self._generator.send(sent))
        except StopIteration as stop:
            return Done(stop.value)

    def close(self) -> None:
        self._generator.close()

    def __repr__(self) -> str:
        return f"GeneratorBody({self._generator!r})"


def as_task_body(obj: Any) -> TaskBody:
    """Coerce a TaskBody or a generator object into a TaskBody."""
    if inspect.isgenerator(obj):
        return GeneratorBody(obj)
    if isinstance(obj, TaskBody):
        return obj
    raise TypeError(
        f"Task body must be a generator or provide advance(sent), got {type(obj).__name__}"
    )

# src/taskpolicy/tasks/task_scheduler.py

from __future__ import annotations

"""
Task scheduler.

Policy-driven admission control for one logical task definition:
- creates a TaskInstance per invocation,
- decides (per policy) whether to run it now, queue it, replace the queue, or drop it,
- tracks queued/running instances and the current run,
- records the last success/error/result.

All bookkeeping happens on one event loop. Completion handling is attached as the
first done-callback of the instance future, so the scheduler is updated before any
other awaiter of that instance wakes up.
"""

import asyncio
import functools
import itertools
import logging
import weakref
from typing import Any, Generic, TypeVar

from ..core.errors import CancellationError
from ..core.ports import BodyFactory, DelayFn
from .delay import timeout
from .task_instance import _NO_CONTEXT, TaskInstance
from .task_models import TaskOptions, TaskPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

_QUEUEING_POLICIES = frozenset({TaskPolicy.QUEUE, TaskPolicy.KEEP_LAST})


class TaskScheduler(Generic[T]):
    """
    Callable scheduler wrapping a task body.

    Calling the scheduler (or invoke()) returns an asyncio future:
    - CONCURRENT: the per-call outcome (value, or the body's exception)
    - DROP: while busy, the running instance's outcome; the new call never runs
    - RESTARTABLE: the per-call outcome; superseded calls resolve with CancellationError
    - QUEUE / KEEP_LAST: last_success once the scheduler goes idle

    Outside CONCURRENT the returned future never fails; errors resolve as values
    and are recorded in last_error/last_result.
    """

    def __init__(
        self,
        body: BodyFactory,
        options: TaskOptions | None = None,
        *,
        context: Any = _NO_CONTEXT,
        name: str | None = None,
        delay: DelayFn = timeout,
    ) -> None:
        options = options or TaskOptions()

        self._body = body
        self._options = options
        self._context = context
        self._delay = delay
        self.name = name or getattr(body, "__qualname__", None) or "task"

        self._seq = itertools.count(1)
        self._queued: list[TaskInstance[T]] = []
        self._running: list[TaskInstance[T]] = []
        self._current: weakref.ref[TaskInstance[T]] | None = None
        self._outcomes: dict[TaskInstance[T], asyncio.Future[Any]] = {}
        self._idle_waiters: list[asyncio.Future[Any]] = []

        self._last_success: T | None = None
        self._last_error: BaseException | None = None
        self._last_result: T | BaseException | None = None

    def __repr__(self) -> str:
        return (
            f"<TaskScheduler {self.name} policy={self.policy.value} "
            f"running={len(self._running)} queued={len(self._queued)}>"
        )

    # ---- observers ----

    @property
    def policy(self) -> TaskPolicy:
        return self._options.policy

    @property
    def debounce_seconds(self) -> float | None:
        return self._options.debounce_seconds

    @property
    def is_running(self) -> bool:
        return self.current_run is not None

    @property
    def current_run(self) -> TaskInstance[T] | None:
        """Most recently started instance still outstanding. Replaced by new calls."""
        return self._current() if self._current is not None else None

    @property
    def queued_instances(self) -> tuple[TaskInstance[T], ...]:
        """Admitted but not started; newest first."""
        return tuple(self._queued)

    @property
    def running_instances(self) -> tuple[TaskInstance[T], ...]:
        return tuple(self._running)

    @property
    def last_success(self) -> T | None:
        return self._last_success

    @property
    def last_error(self) -> BaseException | None:
        return self._last_error

    @property
    def last_result(self) -> T | BaseException | None:
        return self._last_result

    # ---- entry point ----

    def __call__(self, *args: Any, **kwargs: Any) -> asyncio.Future[Any]:
        return self.invoke(self._context, *args, **kwargs)

    def invoke(self, context: Any, *args: Any, **kwargs: Any) -> asyncio.Future[Any]:
        """
        Admit one invocation according to the policy.

        `context` is passed as the first argument of the body factory (like `self`
        for a method). Must be called from inside a running event loop.
        """
        asyncio.get_running_loop()  # fail fast outside an event loop
        instance = self._create_instance(context, args, kwargs)
        policy = self.policy

        if policy is TaskPolicy.QUEUE:
            self._enqueue(instance)
            return self._drain()

        if policy is TaskPolicy.KEEP_LAST:
            self.cancel_queued()
            self._enqueue(instance)
            return self._drain()

        current = self.current_run
        if current is None:
            return self.run(instance)

        if policy is TaskPolicy.DROP:
            logger.debug("Task %s: busy with %s, dropping new call", instance.name, current.name)
            self._drop(instance)
            return self._outcomes[current]

        if policy is TaskPolicy.RESTARTABLE:
            logger.debug("Task %s: restarting (superseding %s)", instance.name, current.name)
            self.cancel_all()
            return self.run(instance)

        return self.run(instance)

    async def wait_idle(self) -> T | None:
        """Wait until nothing is running or queued; returns last_success."""
        if not self._running and not self._queued:
            return self._last_success
        return await self._idle_waiter()

    # ---- cancellation ----

    def cancel(self) -> None:
        """Cancel the current run only."""
        current = self.current_run
        if current is not None:
            self.cancel_instance(current)

    def cancel_instance(self, instance: TaskInstance[T]) -> None:
        instance.cancel()
        self._remove(instance)

    def cancel_queued(self) -> None:
        """Cancel every queued (not yet started) instance."""
        for instance in list(self._queued):
            self.cancel_instance(instance)

    def cancel_running(self) -> None:
        for instance in list(self._running):
            self.cancel_instance(instance)

    def cancel_all(self) -> None:
        """Cancel queued, running and current instances. No-op when idle."""
        self.cancel_queued()
        self.cancel_running()
        self.cancel()

    # ---- mechanics ----

    def run(self, instance: TaskInstance[T]) -> asyncio.Future[Any]:
        """Start `instance` now and track it until it settles."""
        loop = asyncio.get_running_loop()
        future = instance.perform()

        self._current = weakref.ref(instance)
        self._running.append(instance)
        outcome: asyncio.Future[Any] = loop.create_future()
        self._outcomes[instance] = outcome

        future.add_done_callback(functools.partial(self._settle, instance, outcome))
        logger.debug("Task %s: started (running=%d)", instance.name, len(self._running))
        return outcome

    def _settle(self, instance: TaskInstance[T], outcome: asyncio.Future[Any], future: asyncio.Future[Any]) -> None:
        """
        Record the instance's result and release it.

        last_error records every failure, body errors as well as cancellations.
        """
        if future.cancelled():
            if instance.is_finished and instance.error is not None:
                # An awaited sub-operation was cancelled; surface that failure as-is.
                error: BaseException | None = instance.error
            else:
                error = CancellationError(instance.name)
        else:
            error = future.exception()

        if error is None:
            result = future.result()
            self._last_success = result
            self._last_result = result
            self._remove(instance)
            logger.debug("Task %s: finished", instance.name)
            if not outcome.done():
                outcome.set_result(result)
        else:
            self._last_error = error
            self._last_result = error
            self._remove(instance)
            if isinstance(error, CancellationError):
                logger.debug("Task %s: cancelled", instance.name)
            else:
                logger.warning("Task %s failed: %r", instance.name, error, exc_info=error)
            if not outcome.done():
                if self.policy is TaskPolicy.CONCURRENT:
                    outcome.set_exception(error)
                    if isinstance(error, CancellationError):
                        # Mark retrieved: fire-and-forget callers get no report for a cancelled run.
                        outcome.exception()
                else:
                    outcome.set_result(error)

        if self.policy in _QUEUEING_POLICIES:
            self._start_next()
        self._notify_if_idle()

    def _drain(self) -> asyncio.Future[Any]:
        """Advance the queue; the returned future resolves with last_success once idle."""
        self._start_next()
        return self._idle_waiter()

    def _start_next(self) -> None:
        # The queue is newest-first; pop the tail so runs happen in arrival order.
        while self.current_run is None and self._queued:
            self.run(self._queued.pop())

    def _idle_waiter(self) -> asyncio.Future[Any]:
        waiter = asyncio.get_running_loop().create_future()
        if not self._running and not self._queued:
            waiter.set_result(self._last_success)
        else:
            self._idle_waiters.append(waiter)
        return waiter

    def _notify_if_idle(self) -> None:
        if self._running or self._queued or not self._idle_waiters:
            return
        waiters, self._idle_waiters = self._idle_waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(self._last_success)

    def _create_instance(self, context: Any, args: tuple[Any, ...], kwargs: dict[str, Any]) -> TaskInstance[T]:
        return TaskInstance(
            self._body,
            args=args,
            kwargs=kwargs,
            context=context,
            debounce_seconds=self.debounce_seconds,
            name=f"{self.name}#{next(self._seq)}",
            delay=self._delay,
        )

    def _enqueue(self, instance: TaskInstance[T]) -> None:
        self._queued.insert(0, instance)
        logger.debug("Task %s: queued (queued=%d)", instance.name, len(self._queued))

    def _drop(self, instance: TaskInstance[T]) -> None:
        instance.drop()
        self._remove(instance)

    def _remove(self, instance: TaskInstance[T]) -> None:
        if instance in self._running:
            self._running.remove(instance)
        if instance in self._queued:
            self._queued.remove(instance)
        self._outcomes.pop(instance, None)

        if self.current_run is instance:
            # Fall back to the most recently started instance still running.
            self._current = weakref.ref(self._running[-1]) if self._running else None

# src/taskpolicy/tasks/task_instance.py

"""
TaskInstance: one execution of a task body for one invocation.

The instance drives a resumable body forward:
- advance the body,
- await whatever awaitable it suspended on,
- send the settled value back in,
- stop at Done (finished) or when a cancellation is observed.

Cancellation is cooperative: cancel() only flips the state, and the flag is
checked before every advance. An awaitable the body is already waiting on is
not interrupted. The debounce wait is the one exception and is cut short.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Generic, TypeVar

from ..core.errors import CancellationError, TaskStateError
from ..core.ports import BodyFactory, DelayFn, TaskBody
from .delay import timeout
from .task_models import Done, InstanceState, Suspend, as_task_body

logger = logging.getLogger(__name__)

T = TypeVar("T")

_NO_CONTEXT: Any = object()

_TRANSITIONS: dict[InstanceState, frozenset[InstanceState]] = {
    InstanceState.IDLE: frozenset({InstanceState.RUNNING, InstanceState.CANCELLED, InstanceState.DROPPED}),
    InstanceState.RUNNING: frozenset({InstanceState.FINISHED, InstanceState.CANCELLED, InstanceState.DROPPED}),
}


class TaskInstance(Generic[T]):
    """
    Single cancellable run of a task body.

    The body is built lazily from `factory` when the instance actually starts
    (after debounce and after the cancellation check), so a cancelled or
    dropped instance never executes any of its body.
    """

    def __init__(
        self,
        factory: BodyFactory,
        *,
        args: tuple[Any, ...] = (),
        kwargs: dict[str, Any] | None = None,
        context: Any = _NO_CONTEXT,
        debounce_seconds: float | None = None,
        name: str | None = None,
        delay: DelayFn = timeout,
    ) -> None:
        self._factory = factory
        self._args = tuple(args)
        self._kwargs = dict(kwargs or {})
        self._context = context
        self._delay = delay
        self._debounce_waiter: asyncio.Future[Any] | None = None

        self.debounce_seconds = debounce_seconds or None
        self.name = name or getattr(factory, "__qualname__", None) or "task"
        self.state = InstanceState.IDLE
        self.future: asyncio.Task[T] | None = None
        self.value: T | None = None
        self.error: BaseException | None = None

    def __repr__(self) -> str:
        return f"<TaskInstance {self.name} state={self.state.value}>"

    # ---- flags ----

    @property
    def is_started(self) -> bool:
        return self.future is not None

    @property
    def is_running(self) -> bool:
        return self.state is InstanceState.RUNNING

    @property
    def is_dropped(self) -> bool:
        return self.state is InstanceState.DROPPED

    @property
    def is_cancelled(self) -> bool:
        return self.state is InstanceState.CANCELLED

    @property
    def is_finished(self) -> bool:
        return self.state is InstanceState.FINISHED

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    # ---- lifecycle ----

    def perform(self) -> asyncio.Task[T]:
        """
        Start the instance and return its result future.

        Must be called once, on an idle instance, from inside a running event loop.
        """
        if self.state is not InstanceState.IDLE or self.future is not None:
            raise TaskStateError(f"{self.name}: perform() requires an idle instance (state={self.state.value})")

        loop = asyncio.get_running_loop()
        self._transition(InstanceState.RUNNING)
        self.future = loop.create_task(self._drive(), name=self.name)
        return self.future

    def drop(self) -> None:
        """Disown the instance. A running body is left alone; its result is simply ignored."""
        self._transition(InstanceState.DROPPED)

    def cancel(self) -> None:
        """Request cancellation; observed before the next advance of the body."""
        if not self._transition(InstanceState.CANCELLED):
            return
        waiter = self._debounce_waiter
        if waiter is not None and not waiter.done():
            waiter.cancel()

    # ---- driving ----

    async def _drive(self) -> T:
        try:
            if self.debounce_seconds and self.state is not InstanceState.CANCELLED:
                await self._debounce()
            if self.state is InstanceState.CANCELLED:
                raise CancellationError(self.name)
            body = self._build_body()
            value = await self.iterate(body)
        except asyncio.CancelledError as exc:
            if self.state is InstanceState.FINISHED:
                # An awaited sub-operation was cancelled; that is the instance's failure.
                self.error = exc
            else:
                # The asyncio task itself was cancelled (loop shutdown, future.cancel()).
                self._transition(InstanceState.CANCELLED)
            raise
        except Exception as exc:
            self.error = exc
            raise
        self.value = value
        return value

    async def _debounce(self) -> None:
        waiter = asyncio.ensure_future(self._delay(self.debounce_seconds or 0.0))
        self._debounce_waiter = waiter
        try:
            await waiter
        except asyncio.CancelledError:
            if self.state is InstanceState.CANCELLED and waiter.cancelled():
                raise CancellationError(self.name) from None
            raise
        finally:
            self._debounce_waiter = None

    def _build_body(self) -> TaskBody:
        try:
            if self._context is _NO_CONTEXT:
                raw = self._factory(*self._args, **self._kwargs)
            else:
                raw = self._factory(self._context, *self._args, **self._kwargs)
            return as_task_body(raw)
        except Exception:
            self._transition(InstanceState.FINISHED)
            raise

    async def iterate(self, body: TaskBody) -> T:
        """
        Resume `body` until it is done.

        The cancellation check happens before every advance, so a cancel request
        always wins over further progress of the body.
        """
        sent: Any = None
        while True:
            if self.state is InstanceState.CANCELLED:
                _close_body(body)
                raise CancellationError(self.name)

            try:
                step = body.advance(sent)
            except Exception:
                self._transition(InstanceState.FINISHED)
                raise

            if isinstance(step, Done):
                value = step.value
                if inspect.isawaitable(value):
                    value = await self._await_sub_operation(body, value)
                    if self.state is InstanceState.CANCELLED:
                        raise CancellationError(self.name)
                self._transition(InstanceState.FINISHED)
                return value

            if not isinstance(step, Suspend):
                self._transition(InstanceState.FINISHED)
                _close_body(body)
                raise TypeError(f"{self.name}: advance() must return Suspend or Done, got {step!r}")

            if not inspect.isawaitable(step.value):
                sent = step.value
                continue

            sent = await self._await_sub_operation(body, step.value)

    async def _await_sub_operation(self, body: TaskBody, awaitable: Any) -> Any:
        try:
            return await awaitable
        except asyncio.CancelledError:
            if asyncio.current_task().cancelling():
                # The driver itself is being cancelled.
                _close_body(body)
                raise
            # The awaited operation was cancelled from elsewhere: a plain failure.
            self._transition(InstanceState.FINISHED)
            _close_body(body)
            raise
        except Exception:
            # Failures of the awaited operation end the instance.
            self._transition(InstanceState.FINISHED)
            _close_body(body)
            raise

    def _transition(self, target: InstanceState) -> bool:
        current = self.state
        if current.is_terminal:
            return False
        if target not in _TRANSITIONS[current]:
            raise TaskStateError(f"{self.name}: illegal transition {current.value} -> {target.value}")
        self.state = target
        logger.debug("Task %s: %s -> %s", self.name, current.value, target.value)
        return True


def _close_body(body: TaskBody) -> None:
    close = getattr(body, "close", None)
    if callable(close):
        close()

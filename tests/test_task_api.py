# tests/test_task_api.py

from __future__ import annotations

import asyncio

import pytest

from taskpolicy import InstanceState, TaskOptions, TaskPolicy, make_task, timeout

from .fakes import Counter


class Search:
    """Call-site style usage: the scheduler lives on the owning object."""

    def __init__(self) -> None:
        self.results: list[str] = []
        self.perform = make_task(Search._perform, policy="restartable", context=self)

    def _perform(self, query: str):
        yield timeout(0.02)
        self.results.append(query)
        return query


@pytest.mark.asyncio
async def test_make_task_binds_context_like_a_method() -> None:
    search = Search()

    for q in ("t", "ta", "task"):
        search.perform(q)

    assert await asyncio.wait_for(search.perform.wait_idle(), timeout=1.0) == "task"
    assert search.results == ["task"]
    assert search.perform.name == "Search._perform"


@pytest.mark.asyncio
async def test_make_task_has_a_real_return_value() -> None:
    def body(count):
        return count * 3
        yield  # pragma: no cover

    perform = make_task(body)

    assert perform.policy is TaskPolicy.CONCURRENT
    assert await perform(3) == 9
    assert perform.last_success == 9


@pytest.mark.asyncio
async def test_make_task_accepts_options_object(counter: Counter) -> None:
    opts = TaskOptions(policy=TaskPolicy.DROP)
    perform = make_task(Counter.bump, opts, context=counter, name="bump")

    assert perform.policy is TaskPolicy.DROP
    assert await perform(4) == 4
    assert perform.name == "bump"


def test_make_task_rejects_options_and_keywords_together() -> None:
    with pytest.raises(TypeError):
        make_task(Counter.bump, TaskOptions(), policy="drop")


def test_task_options_from_settings(settings) -> None:
    opts = TaskOptions.from_settings(settings)

    assert opts.policy is TaskPolicy.RESTARTABLE
    assert opts.debounce_seconds == 0.01


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, TaskPolicy.CONCURRENT),
        ("", TaskPolicy.CONCURRENT),
        ("drop", TaskPolicy.DROP),
        ("KEEP_LAST", TaskPolicy.KEEP_LAST),
        ("keepLast", TaskPolicy.KEEP_LAST),
        ("keep-last", TaskPolicy.KEEP_LAST),
        ("restart", TaskPolicy.RESTARTABLE),
        ("Restartable", TaskPolicy.RESTARTABLE),
        (" queue ", TaskPolicy.QUEUE),
        (TaskPolicy.QUEUE, TaskPolicy.QUEUE),
    ],
)
def test_policy_parse(raw, expected) -> None:
    assert TaskPolicy.parse(raw) is expected


def test_policy_parse_unknown() -> None:
    with pytest.raises(ValueError, match="Unknown task policy"):
        TaskPolicy.parse("lifo")


def test_task_options_validation() -> None:
    assert TaskOptions().policy is TaskPolicy.CONCURRENT
    assert TaskOptions().debounce_seconds is None
    assert TaskOptions(policy="queue").policy is TaskPolicy.QUEUE
    assert TaskOptions(debounce_seconds=0).debounce_seconds is None

    with pytest.raises(ValueError):
        TaskOptions(debounce_seconds=-1)


def test_terminal_states() -> None:
    assert {s for s in InstanceState if s.is_terminal} == {
        InstanceState.DROPPED,
        InstanceState.CANCELLED,
        InstanceState.FINISHED,
    }

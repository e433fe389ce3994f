# src/taskpolicy/cli/main.py

"""
CLI entrypoint.

Initializes logging from settings, then runs a small demonstration per policy:
a counter task invoked several times in quick succession, followed by a report of
what each policy let through.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from ..config import Settings, get_settings
from ..logging_setup import setup_logging
from ..tasks.delay import timeout
from ..tasks.task_api import make_task
from ..tasks.task_models import TaskOptions, TaskPolicy

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DemoCounter:
    """Shared state mutated by the demo task body."""

    total: int = 0
    applied: list[int] = field(default_factory=list)

    def add(self, step_seconds: float, amount: int):
        yield timeout(step_seconds)
        self.total += amount
        self.applied.append(amount)
        return self.total


@dataclass(slots=True, frozen=True)
class DemoReport:
    policy: TaskPolicy
    total: int
    applied: tuple[int, ...]
    last_result: object


async def run_policy_demo(
    policy: TaskPolicy,
    *,
    invocations: int = 3,
    step_seconds: float = 0.1,
    debounce_seconds: float | None = None,
) -> DemoReport:
    counter = DemoCounter()
    perform = make_task(
        DemoCounter.add,
        TaskOptions(policy=policy, debounce_seconds=debounce_seconds),
        context=counter,
        name=f"demo.{policy.value}",
    )

    for n in range(1, invocations + 1):
        perform(step_seconds, n)

    # Worst case is Queue: every call runs back to back.
    await asyncio.sleep((step_seconds + (debounce_seconds or 0.0)) * (invocations + 1))
    await perform.wait_idle()

    return DemoReport(
        policy=policy,
        total=counter.total,
        applied=tuple(counter.applied),
        last_result=perform.last_result,
    )


async def run_demo(settings: Settings) -> list[DemoReport]:
    reports: list[DemoReport] = []
    for policy in settings.demo_policies:
        report = await run_policy_demo(
            policy,
            invocations=settings.demo_invocations,
            step_seconds=settings.demo_step_seconds,
            debounce_seconds=settings.default_debounce_seconds,
        )
        logger.info(
            "%-11s applied=%s total=%d last_result=%r",
            report.policy.value,
            list(report.applied),
            report.total,
            report.last_result,
        )
        reports.append(report)
    return reports


def main() -> None:
    settings = get_settings()

    console_level = getattr(logging, settings.log_level, logging.INFO)
    setup_logging(
        log_dir=settings.log_dir if settings.log_to_file else None,
        console_level=console_level,
    )

    logger.info(
        "Starting %s demo: %d invocation(s) per policy, step=%.3fs",
        settings.app_name,
        settings.demo_invocations,
        settings.demo_step_seconds,
    )

    try:
        asyncio.run(run_demo(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    logger.info("Bye.")


if __name__ == "__main__":
    main()

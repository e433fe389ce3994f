# src/taskpolicy/tasks/delay.py

from __future__ import annotations

import asyncio


async def timeout(seconds: float) -> None:
    """
    Resolve after `seconds`.

    Used for debounce and handy inside task bodies (`yield timeout(0.1)`).
    Cancelling the awaiting asyncio task interrupts the wait.
    """
    await asyncio.sleep(max(0.0, float(seconds)))

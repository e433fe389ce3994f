# tests/conftest.py

from __future__ import annotations

import os
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskpolicy.config import reset_settings
from taskpolicy.tasks.task_models import TaskPolicy

from .fakes import Counter


@pytest.fixture()
def counter() -> Counter:
    return Counter()


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with TaskOptions.from_settings() and the demo CLI.

    We intentionally use a SimpleNamespace rather than reading the environment,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskpolicy-test",
        log_level="DEBUG",
        log_dir=tmp_path / "logs",
        log_to_file=False,
        default_policy=TaskPolicy.RESTARTABLE,
        default_debounce_seconds=0.01,
        demo_policies=(TaskPolicy.DROP, TaskPolicy.QUEUE),
        demo_invocations=3,
        demo_step_seconds=0.02,
    )


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Strip TASKPOLICY_* variables and the cached Settings around a test."""
    for key in list(os.environ):
        if key.startswith("TASKPOLICY_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield monkeypatch
    reset_settings()

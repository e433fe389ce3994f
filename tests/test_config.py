# tests/test_config.py

from __future__ import annotations

from pathlib import Path

from taskpolicy.config import ALL_POLICIES, Settings, get_settings, reset_settings
from taskpolicy.tasks.task_models import TaskPolicy


def test_defaults(clean_env) -> None:
    s = Settings.from_env()

    assert s.app_name == "taskpolicy"
    assert s.log_level == "INFO"
    assert s.log_dir == Path(".local/taskpolicy")
    assert s.log_to_file is False
    assert s.default_policy is TaskPolicy.CONCURRENT
    assert s.default_debounce_seconds is None
    assert s.demo_policies == ALL_POLICIES
    assert s.demo_invocations == 3
    assert s.demo_step_seconds == 0.1


def test_env_overrides(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("TASKPOLICY_LOG_LEVEL", "debug")
    clean_env.setenv("TASKPOLICY_LOG_DIR", str(tmp_path))
    clean_env.setenv("TASKPOLICY_LOG_TO_FILE", "yes")
    clean_env.setenv("TASKPOLICY_DEFAULT_POLICY", "keepLast")
    clean_env.setenv("TASKPOLICY_DEBOUNCE_SECONDS", "0.25")
    clean_env.setenv("TASKPOLICY_DEMO_POLICIES", "drop, queue drop")
    clean_env.setenv("TASKPOLICY_DEMO_INVOCATIONS", "5")
    clean_env.setenv("TASKPOLICY_DEMO_STEP_SECONDS", "0.01")

    s = Settings.from_env()

    assert s.log_level == "DEBUG"
    assert s.log_dir == tmp_path
    assert s.log_to_file is True
    assert s.default_policy is TaskPolicy.KEEP_LAST
    assert s.default_debounce_seconds == 0.25
    assert s.demo_policies == (TaskPolicy.DROP, TaskPolicy.QUEUE)
    assert s.demo_invocations == 5
    assert s.demo_step_seconds == 0.01


def test_malformed_values_fall_back(clean_env) -> None:
    clean_env.setenv("TASKPOLICY_DEFAULT_POLICY", "lifo")
    clean_env.setenv("TASKPOLICY_DEBOUNCE_SECONDS", "-3")
    clean_env.setenv("TASKPOLICY_DEMO_POLICIES", "nope")
    clean_env.setenv("TASKPOLICY_DEMO_INVOCATIONS", "many")
    clean_env.setenv("TASKPOLICY_DEMO_STEP_SECONDS", "soon")

    s = Settings.from_env()

    assert s.default_policy is TaskPolicy.CONCURRENT
    assert s.default_debounce_seconds is None
    assert s.demo_policies == ALL_POLICIES
    assert s.demo_invocations == 3
    assert s.demo_step_seconds == 0.1


def test_get_settings_is_cached_until_reset(clean_env, tmp_path: Path) -> None:
    clean_env.chdir(tmp_path)  # no stray .env
    clean_env.setenv("TASKPOLICY_APP_NAME", "first")
    first = get_settings()

    clean_env.setenv("TASKPOLICY_APP_NAME", "second")
    assert get_settings() is first

    reset_settings()
    assert get_settings().app_name == "second"

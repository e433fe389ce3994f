# src/taskpolicy/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Library code never reads settings implicitly; only the CLI and callers that
  opt in via TaskOptions.from_settings().
- Malformed values fall back to defaults instead of failing at import time.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .tasks.task_models import TaskPolicy

logger = logging.getLogger(__name__)

ENV_PREFIX = "TASKPOLICY"

ALL_POLICIES: tuple[TaskPolicy, ...] = tuple(TaskPolicy)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float | None) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_policy(name: str, default: TaskPolicy) -> TaskPolicy:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return TaskPolicy.parse(raw)
    except ValueError:
        logger.warning("Ignoring unknown policy in %s: %r", name, raw)
        return default


def _env_policies(name: str, default: tuple[TaskPolicy, ...]) -> tuple[TaskPolicy, ...]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    out: list[TaskPolicy] = []
    for part in raw.replace(",", " ").split():
        try:
            policy = TaskPolicy.parse(part)
        except ValueError:
            logger.warning("Ignoring unknown policy in %s: %r", name, part)
            continue
        if policy not in out:
            out.append(policy)
    return tuple(out) or default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path
    log_to_file: bool

    # ---- Task defaults ----
    default_policy: TaskPolicy
    default_debounce_seconds: float | None

    # ---- Demo CLI ----
    demo_policies: tuple[TaskPolicy, ...]
    demo_invocations: int
    demo_step_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskpolicy").strip() or "taskpolicy"
        log_level = _env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO"
        log_dir = _env_path(_k("LOG_DIR"), Path(".local/taskpolicy"))
        log_to_file = _env_bool(_k("LOG_TO_FILE"), False)

        default_policy = _env_policy(_k("DEFAULT_POLICY"), TaskPolicy.CONCURRENT)
        default_debounce_seconds = _env_float(_k("DEBOUNCE_SECONDS"), None) or None

        demo_policies = _env_policies(_k("DEMO_POLICIES"), ALL_POLICIES)
        demo_invocations = max(1, _env_int(_k("DEMO_INVOCATIONS"), 3))
        demo_step_seconds = _env_float(_k("DEMO_STEP_SECONDS"), 0.1) or 0.1

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_dir=log_dir,
            log_to_file=log_to_file,
            default_policy=default_policy,
            default_debounce_seconds=default_debounce_seconds,
            demo_policies=demo_policies,
            demo_invocations=demo_invocations,
            demo_step_seconds=demo_step_seconds,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Load .env (without overriding the real environment) and build Settings once."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS


def reset_settings() -> None:
    """Forget cached settings (tests, or after changing the environment)."""
    global _SETTINGS
    _SETTINGS = None

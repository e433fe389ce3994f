# tests/test_logging_setup.py

from __future__ import annotations

import contextlib
import logging
from pathlib import Path

from taskpolicy.logging_setup import _ConsoleNoiseFilter, setup_logging


@contextlib.contextmanager
def preserved_root_logging():
    """setup_logging() replaces root handlers; put the originals back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    try:
        yield root
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            if h not in handlers:
                h.close()
        for h in handlers:
            root.addHandler(h)
        root.setLevel(level)
        logging.captureWarnings(False)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_keeps_own_logs_and_mutes_third_party() -> None:
    f = _ConsoleNoiseFilter()

    assert f.filter(_record("taskpolicy.tasks.task_scheduler", logging.DEBUG))
    assert f.filter(_record("taskpolicy", logging.INFO))

    assert not f.filter(_record("asyncio", logging.INFO))
    assert f.filter(_record("asyncio", logging.WARNING))

    assert not f.filter(_record("py.warnings", logging.WARNING))
    assert not f.filter(_record("urllib3", logging.WARNING))
    assert f.filter(_record("urllib3", logging.ERROR))


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    with preserved_root_logging() as root:
        setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING)

        logging.getLogger("taskpolicy.test").debug("hello file")
        for h in root.handlers:
            h.flush()

    log_file = tmp_path / "logs" / "taskpolicy.log"
    assert log_file.exists()
    assert "hello file" in log_file.read_text("utf-8")


def test_setup_logging_without_dir_is_console_only() -> None:
    with preserved_root_logging() as root:
        setup_logging(console_level=logging.INFO)
        handlers = list(root.handlers)

    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.StreamHandler)
    assert not isinstance(handlers[0], logging.FileHandler)

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .profiles import _work_dir

LOG_DIR_ENV = "CHRONOPILOT_LOG_DIR"

_LOGGER: logging.Logger | None = None


def _log_dir(log_dir: Path | None) -> Path:
    if log_dir is not None:
        return Path(log_dir)
    env = os.getenv(LOG_DIR_ENV)
    if env:
        return Path(env)
    return _work_dir() / "logs"


def get_logger(log_dir: Path | None = None) -> logging.Logger:
    """Return the ``chronopilot`` logger writing to ``work/logs/app.log`` and stdout.

    The log directory can be moved with ``CHRONOPILOT_LOG_DIR``. Handlers are
    attached on first use only.
    """
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER

    base = _log_dir(log_dir)
    base.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("chronopilot")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    fmt = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(
        base / "app.log", maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(fmt)
    logger.addHandler(file_handler)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(fmt)
    logger.addHandler(console)

    _LOGGER = logger
    return logger


def set_level(level: int) -> None:
    """Apply ``level`` to the application and engine loggers."""

    get_logger().setLevel(level)
    logging.getLogger("chronopilot_pdf").setLevel(level)

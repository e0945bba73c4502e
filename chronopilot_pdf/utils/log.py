"""Logging helpers for the chronopilot_pdf package."""

# Module responsibilities:
# - Centralize logging configuration with a stream handler and an optional rotating file.
# - Provide get_logger() that configures the package root logger exactly once.

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

LOG_DIR_ENV = "CHRONOPILOT_PDF_LOG_DIR"
_LOG_CONFIGURED = False


def _resolve_log_dir(log_dir: Optional[Path] = None) -> Optional[Path]:
    """Resolve the log directory from the argument or environment, ensuring existence."""
    target = log_dir
    if target is None:
        env_value = os.getenv(LOG_DIR_ENV)
        target = Path(env_value) if env_value else None
    if target is not None:
        target.mkdir(parents=True, exist_ok=True)
    return target


def _configure_logging(log_dir: Optional[Path] = None) -> None:
    """Configure the package logger once with console and optional file handlers."""
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger("chronopilot_pdf")
    root_logger.setLevel(logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.INFO)
    root_logger.addHandler(console_handler)

    directory = _resolve_log_dir(log_dir)
    if directory is not None:
        file_handler = logging.handlers.RotatingFileHandler(
            directory / "chronopilot_pdf.log", maxBytes=2_000_000, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.INFO)
        root_logger.addHandler(file_handler)

    root_logger.propagate = False
    _LOG_CONFIGURED = True


def get_logger(name: str, log_dir: Optional[Path] = None) -> logging.Logger:
    """Return a package-scoped logger.

    Args:
        name: Logger name suffix appended to the package root logger namespace.
        log_dir: Optional directory for a rotating log file. Falls back to
            ``CHRONOPILOT_PDF_LOG_DIR``; without either only the console is used.

    Returns:
        Configured logger scoped under ``chronopilot_pdf``.
    """

    _configure_logging(log_dir)
    return logging.getLogger(f"chronopilot_pdf.{name}")

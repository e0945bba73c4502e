"""Bundled configuration files for ChronoPilot runs."""

from __future__ import annotations

from pathlib import Path

CONFIG_DIR = Path(__file__).resolve().parent
DEFAULT_PROFILES_PATH = CONFIG_DIR / "profiles.yaml"

__all__ = ["CONFIG_DIR", "DEFAULT_PROFILES_PATH"]

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Mapping

from chronopilot.core.errors import ConfigError
from chronopilot.core.profiles import DynamicTableSettings, SourceSettings

Row = dict[str, Any]


def current_month_suffix(today: date) -> str:
    """Suffix of per-month table names, e.g. ``03_2025``."""

    return f"{today.month:02d}_{today.year}"


class IDataSource(ABC):
    """Interface for dataset row providers."""

    @abstractmethod
    def fetch_rows(self, table: str) -> list[Row]:
        """Return all rows of ``table`` in source order."""

    @abstractmethod
    def list_dynamic_tables(self, settings: DynamicTableSettings, today: date) -> list[str]:
        """Return names of the per-month tables selected by ``settings``."""

    @abstractmethod
    def call_rpc(self, name: str, params: Mapping[str, Any] | None = None) -> Any:
        """Invoke a named maintenance procedure on the source."""

    def close(self) -> None:
        """Release network or file resources."""


def filter_current_month(names: list[str], settings: DynamicTableSettings, today: date) -> list[str]:
    if not settings.current_month_only:
        return names
    suffix = current_month_suffix(today)
    return [name for name in names if name.endswith(suffix)]


def source_from_config(cfg: SourceSettings) -> IDataSource:
    stype = (cfg.type or "supabase").lower()
    if stype in {"supabase", "postgrest"}:
        from .supabase import SupabaseDataSource

        return SupabaseDataSource.from_settings(cfg)
    if stype in {"files", "file", "local"}:
        from .files import FileDataSource

        return FileDataSource.from_settings(cfg)
    raise ConfigError(f"Unknown data source type: {stype}")

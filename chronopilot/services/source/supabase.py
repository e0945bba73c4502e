"""Rows, table listings and RPCs from a Supabase project."""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from chronopilot.core.errors import DataSourceError
from chronopilot.core.logger import get_logger
from chronopilot.core.profiles import DynamicTableSettings, SourceSettings
from chronopilot.services.http import ServiceError
from chronopilot.services.supabase import SupabaseClient, resolve_config

from .base import IDataSource, Row, filter_current_month

LOGGER = get_logger()


class SupabaseDataSource(IDataSource):
    def __init__(self, client: SupabaseClient, *, page_size: int = 1000) -> None:
        self.client = client
        self.page_size = page_size

    @classmethod
    def from_settings(cls, cfg: SourceSettings) -> "SupabaseDataSource":
        return cls(SupabaseClient(resolve_config()), page_size=cfg.page_size)

    def fetch_rows(self, table: str) -> list[Row]:
        try:
            return self.client.select_all(table, page_size=self.page_size)
        except ServiceError as exc:
            raise DataSourceError(f"Fetching {table} failed: {exc}") from exc

    def list_dynamic_tables(self, settings: DynamicTableSettings, today: date) -> list[str]:
        try:
            payload = self.client.rpc(settings.rpc)
        except ServiceError as exc:
            raise DataSourceError(f"Listing dynamic tables via {settings.rpc} failed: {exc}") from exc
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise DataSourceError(f"{settings.rpc} returned {type(payload).__name__}, expected a list")
        names: list[str] = []
        for entry in payload:
            if isinstance(entry, Mapping):
                value = entry.get(settings.name_field)
            else:
                value = entry
            if isinstance(value, str) and value:
                names.append(value)
            else:
                LOGGER.warning("Ignoring dynamic table entry without %s: %r", settings.name_field, entry)
        return filter_current_month(names, settings, today)

    def call_rpc(self, name: str, params: Mapping[str, Any] | None = None) -> Any:
        try:
            return self.client.rpc(name, params)
        except ServiceError as exc:
            raise DataSourceError(f"RPC {name} failed: {exc}") from exc

    def close(self) -> None:
        self.client.close()

"""Local table exports: one CSV, XLSX or JSON file per table."""

# Module responsibilities:
# - Read table exports with pandas and hand rows back as plain dictionaries.
# - Normalize pandas-specific values (NaN, NaT, Timestamp, numpy scalars).
# - List per-month tables from the files present in the directory.

from __future__ import annotations

import json
import math
from datetime import date
from pathlib import Path
from typing import Any, Mapping

import pandas as pd

from chronopilot.core.errors import ConfigError, DataSourceError
from chronopilot.core.logger import get_logger
from chronopilot.core.profiles import DynamicTableSettings, SourceSettings, resolve_work_path

from .base import IDataSource, Row, filter_current_month

LOGGER = get_logger()

SUPPORTED_SUFFIXES = (".csv", ".xlsx", ".json")
RPC_LOG_NAME = "rpc_calls.jsonl"


def _normalize(value: Any) -> Any:
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            return None
        if value.tzinfo is None and value == value.normalize():
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, float) and math.isnan(value):
        return None
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        # numpy scalar
        return _normalize(value.item())
    return value


def frame_to_rows(frame: pd.DataFrame) -> list[Row]:
    """Convert ``frame`` into dictionaries keeping the column order."""

    columns = [str(column) for column in frame.columns]
    rows: list[Row] = []
    for record in frame.itertuples(index=False, name=None):
        rows.append({column: _normalize(value) for column, value in zip(columns, record)})
    return rows


class FileDataSource(IDataSource):
    """Serve tables from ``directory/<table>.<csv|xlsx|json>``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    @classmethod
    def from_settings(cls, cfg: SourceSettings) -> "FileDataSource":
        if not cfg.directory:
            raise ConfigError("source.directory is required for the files source")
        return cls(resolve_work_path(cfg.directory))

    def _locate(self, table: str) -> Path:
        for suffix in SUPPORTED_SUFFIXES:
            candidate = self.directory / f"{table}{suffix}"
            if candidate.exists():
                return candidate
        raise DataSourceError(f"No export found for table {table} in {self.directory}")

    def fetch_rows(self, table: str) -> list[Row]:
        path = self._locate(table)
        LOGGER.info("Reading table export %s", path)
        try:
            frame = read_frame(path)
        except (OSError, ValueError) as exc:
            raise DataSourceError(f"Reading {path} failed: {exc}") from exc
        return frame_to_rows(frame)

    def list_dynamic_tables(self, settings: DynamicTableSettings, today: date) -> list[str]:
        if not self.directory.is_dir():
            raise DataSourceError(f"Source directory not found: {self.directory}")
        names = sorted(
            {
                path.stem
                for path in self.directory.iterdir()
                if path.suffix.lower() in SUPPORTED_SUFFIXES
            }
        )
        return filter_current_month(names, settings, today)

    def call_rpc(self, name: str, params: Mapping[str, Any] | None = None) -> Any:
        """Record the call in ``rpc_calls.jsonl``; there is no server to run it."""

        self.directory.mkdir(parents=True, exist_ok=True)
        entry = {"rpc": name, "params": dict(params or {})}
        with (self.directory / RPC_LOG_NAME).open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry, ensure_ascii=False) + "\n")
        LOGGER.info("Recorded offline RPC %s", name)
        return None


def read_frame(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path)
    if suffix == ".xlsx":
        return pd.read_excel(path)
    if suffix == ".json":
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, list):
            raise ValueError(f"{path.name} must contain a JSON array of objects")
        return pd.DataFrame.from_records(payload)
    raise ValueError(f"Unsupported export format: {path.suffix}")

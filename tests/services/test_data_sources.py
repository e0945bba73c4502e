from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pandas as pd
import pytest

from chronopilot.core.errors import ConfigError, DataSourceError
from chronopilot.core.profiles import DynamicTableSettings, SourceSettings
from chronopilot.services.http import ServiceRequestError
from chronopilot.services.source import IDataSource, current_month_suffix, source_from_config
from chronopilot.services.source.files import FileDataSource
from chronopilot.services.source.supabase import SupabaseDataSource

TODAY = date(2025, 3, 15)


class StubClient:
    def __init__(self, tables: dict | None = None, listing=None, error: Exception | None = None) -> None:
        self.tables = tables or {}
        self.listing = listing
        self.error = error
        self.rpc_calls: list[tuple[str, dict | None]] = []

    def select_all(self, table: str, *, columns: str = "*", page_size: int = 1000):
        if self.error:
            raise self.error
        return self.tables[table]

    def rpc(self, name: str, params=None):
        if self.error:
            raise self.error
        self.rpc_calls.append((name, params))
        return self.listing

    def close(self) -> None:
        pass


def test_current_month_suffix() -> None:
    assert current_month_suffix(date(2025, 3, 1)) == "03_2025"
    assert current_month_suffix(date(2024, 11, 30)) == "11_2024"


def test_supabase_listing_keeps_current_month_tables() -> None:
    client = StubClient(
        listing=[
            {"table_name": "zeiten_03_2025"},
            {"table_name": "zeiten_02_2025"},
            {"table_name": "baustelle_nord_03_2025"},
            {"other": "ignored"},
        ]
    )
    source = SupabaseDataSource(client)  # type: ignore[arg-type]

    names = source.list_dynamic_tables(DynamicTableSettings(), TODAY)

    assert names == ["zeiten_03_2025", "baustelle_nord_03_2025"]
    assert client.rpc_calls == [("get_dynamic_tables", None)]


def test_supabase_listing_without_month_filter() -> None:
    client = StubClient(listing=["a_01_2025", "b"])
    source = SupabaseDataSource(client)  # type: ignore[arg-type]

    assert source.list_dynamic_tables(DynamicTableSettings(current_month_only=False), TODAY) == ["a_01_2025", "b"]


def test_supabase_errors_become_data_source_errors() -> None:
    source = SupabaseDataSource(StubClient(error=ServiceRequestError("boom", status_code=400)))  # type: ignore[arg-type]

    with pytest.raises(DataSourceError):
        source.fetch_rows("raw_data")
    with pytest.raises(DataSourceError):
        source.call_rpc("data_rollover")


def test_file_source_reads_csv(tmp_path: Path) -> None:
    (tmp_path / "raw_data.csv").write_text(
        "id,datum,notiz\n1,2025-03-01,Baustelle\n2,,\n", encoding="utf-8"
    )

    rows = FileDataSource(tmp_path).fetch_rows("raw_data")

    assert rows == [
        {"id": 1, "datum": "2025-03-01", "notiz": "Baustelle"},
        {"id": 2, "datum": None, "notiz": None},
    ]
    assert type(rows[0]["id"]) is int


def test_file_source_reads_json_in_key_order(tmp_path: Path) -> None:
    payload = [{"stunden": 8, "mitarbeiter": "Anna"}, {"stunden": 6.5, "mitarbeiter": "Jonas"}]
    (tmp_path / "gesamtzeiten.json").write_text(json.dumps(payload), encoding="utf-8")

    rows = FileDataSource(tmp_path).fetch_rows("gesamtzeiten")

    assert list(rows[0]) == ["stunden", "mitarbeiter"]
    assert rows[1]["stunden"] == 6.5


def test_file_source_reads_xlsx_timestamps(tmp_path: Path) -> None:
    frame = pd.DataFrame(
        {
            "datum": pd.to_datetime(["2025-03-01", "2025-03-02"]),
            "start": pd.to_datetime(["2025-03-01 07:30", None]),
        }
    )
    frame.to_excel(tmp_path / "daily_summary.xlsx", index=False)

    rows = FileDataSource(tmp_path).fetch_rows("daily_summary")

    assert rows[0] == {"datum": "2025-03-01", "start": "2025-03-01T07:30:00"}
    assert rows[1] == {"datum": "2025-03-02", "start": None}


def test_file_source_missing_table(tmp_path: Path) -> None:
    with pytest.raises(DataSourceError):
        FileDataSource(tmp_path).fetch_rows("raw_data")


def test_file_source_lists_monthly_exports(tmp_path: Path) -> None:
    for name in ("zeiten_03_2025.csv", "zeiten_02_2025.csv", "raw_data.json", "notizen.txt"):
        (tmp_path / name).write_text("id\n1\n", encoding="utf-8")
    source = FileDataSource(tmp_path)

    assert source.list_dynamic_tables(DynamicTableSettings(), TODAY) == ["zeiten_03_2025"]
    assert source.list_dynamic_tables(DynamicTableSettings(current_month_only=False), TODAY) == [
        "raw_data",
        "zeiten_02_2025",
        "zeiten_03_2025",
    ]


def test_file_source_records_rpc_calls(tmp_path: Path) -> None:
    source = FileDataSource(tmp_path)

    assert source.call_rpc("update_monthly_freizeitkonto") is None

    lines = (tmp_path / "rpc_calls.jsonl").read_text(encoding="utf-8").splitlines()
    assert [json.loads(line) for line in lines] == [{"rpc": "update_monthly_freizeitkonto", "params": {}}]


def test_source_without_rpc_support_cannot_be_built() -> None:
    class ReadOnlySource(IDataSource):
        def fetch_rows(self, table: str) -> list[dict]:
            return []

        def list_dynamic_tables(self, settings: DynamicTableSettings, today: date) -> list[str]:
            return []

    with pytest.raises(TypeError, match="call_rpc"):
        ReadOnlySource()


def test_source_from_config(tmp_path: Path) -> None:
    source = source_from_config(SourceSettings(type="files", directory=str(tmp_path)))
    assert isinstance(source, FileDataSource)
    assert source.directory == tmp_path

    with pytest.raises(ConfigError):
        source_from_config(SourceSettings(type="files"))
    with pytest.raises(ConfigError):
        source_from_config(SourceSettings(type="ftp"))

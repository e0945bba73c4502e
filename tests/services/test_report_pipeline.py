from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from chronopilot.core import pipeline as pipeline_module
from chronopilot.core.errors import ConfigError, DataSourceError, DeliveryError, StorageError
from chronopilot.core.pipeline import ReportPipeline
from chronopilot.core.profiles import DynamicTableSettings, MailSettings, Profile, RenderSettings, StorageSettings
from chronopilot.services.delivery.base import IMailer, IStorage
from chronopilot.services.source.base import IDataSource, filter_current_month
from chronopilot_pdf import LayoutError

TODAY = date(2025, 3, 15)


class FakeSource(IDataSource):
    def __init__(self, tables: dict[str, list[dict]]) -> None:
        self.tables = tables
        self.rpc_calls: list[str] = []

    def fetch_rows(self, table: str) -> list[dict]:
        if table not in self.tables:
            raise DataSourceError(f"relation {table} does not exist")
        return self.tables[table]

    def list_dynamic_tables(self, settings: DynamicTableSettings, today: date) -> list[str]:
        return filter_current_month(sorted(self.tables), settings, today)

    def call_rpc(self, name: str, params=None):
        self.rpc_calls.append(name)
        return {"updated": 4}


class FakeMailer(IMailer):
    def __init__(self, error: Exception | None = None) -> None:
        self.sent: list[tuple[str, list[str]]] = []
        self.error = error

    def send(self, subject, body, documents) -> None:
        if self.error:
            raise self.error
        self.sent.append((subject, [doc.filename for doc in documents]))


class FakeStorage(IStorage):
    def __init__(self) -> None:
        self.stored: list[str] = []

    def store(self, document) -> str:
        self.stored.append(document.filename)
        return f"reports/{document.filename}"


def _tables() -> dict[str, list[dict]]:
    return {
        "raw_data": [{"id": 1, "datum": "2025-03-01"}, {"id": 2, "datum": "2025-03-02"}],
        "zeiten_03_2025": [{"mitarbeiter": "Anna", "stunden": 8}],
        "zeiten_02_2025": [{"mitarbeiter": "Anna", "stunden": 7}],
    }


def _profile(**overrides) -> Profile:
    payload = {
        "name": "monthly",
        "display_name": "Monatsabschluss",
        "static_tables": ["raw_data", "urlaubsantraege"],
        "dynamic_tables": DynamicTableSettings(),
        "post_run_rpcs": ["update_monthly_freizeitkonto"],
    }
    payload.update(overrides)
    return Profile(**payload)


def _pipeline(source=None, mailer=None, storage=None) -> ReportPipeline:
    return ReportPipeline(source=source or FakeSource(_tables()), mailer=mailer or FakeMailer(), storage=storage or FakeStorage())


def test_full_run_renders_mails_uploads_and_cleans_up(tmp_path: Path) -> None:
    source, mailer, storage = FakeSource(_tables()), FakeMailer(), FakeStorage()
    stages: list[str] = []

    result = ReportPipeline(source=source, mailer=mailer, storage=storage).run(
        _profile(), today=TODAY, out_dir=tmp_path, progress_cb=lambda stage, _detail: stages.append(stage)
    )

    assert result.ok
    assert [doc.name for doc in result.documents] == ["raw_data", "zeiten_03_2025"]
    assert list(result.skipped) == ["urlaubsantraege"]
    assert mailer.sent == [("ChronoPilot - Monatliche Berichte", ["raw_data.pdf", "zeiten_03_2025.pdf"])]
    assert result.mailed
    assert storage.stored == ["raw_data.pdf", "zeiten_03_2025.pdf"]
    assert result.uploaded == ["reports/raw_data.pdf", "reports/zeiten_03_2025.pdf"]
    assert list(tmp_path.glob("*.pdf")) == []
    assert source.rpc_calls == ["update_monthly_freizeitkonto"]
    assert result.rpc_results == {"update_monthly_freizeitkonto": {"updated": 4}}
    assert stages[0].startswith("1/5") and stages[-1].startswith("5/5")


def test_keep_local_leaves_files(tmp_path: Path) -> None:
    result = _pipeline().run(_profile(), today=TODAY, out_dir=tmp_path, keep_local=True)

    assert sorted(path.name for path in tmp_path.glob("*.pdf")) == ["raw_data.pdf", "zeiten_03_2025.pdf"]
    assert len(result.written) == 2


def test_mail_and_upload_can_be_disabled(tmp_path: Path) -> None:
    mailer, storage = FakeMailer(), FakeStorage()

    result = _pipeline(mailer=mailer, storage=storage).run(
        _profile(), today=TODAY, out_dir=tmp_path, send_mail=False, upload=False
    )

    assert not result.mailed
    assert mailer.sent == []
    assert storage.stored == []
    assert len(result.documents) == 2


def test_profile_with_mail_disabled(tmp_path: Path) -> None:
    mailer = FakeMailer()
    _pipeline(mailer=mailer).run(_profile(mail=MailSettings(enabled=False)), today=TODAY, out_dir=tmp_path)
    assert mailer.sent == []


def test_no_documents_means_no_delivery(tmp_path: Path) -> None:
    mailer, storage = FakeMailer(), FakeStorage()

    result = _pipeline(source=FakeSource({}), mailer=mailer, storage=storage).run(
        _profile(), today=TODAY, out_dir=tmp_path
    )

    assert result.documents == []
    assert set(result.skipped) == {"raw_data", "urlaubsantraege"}
    assert mailer.sent == []
    assert storage.stored == []


def test_render_failure_is_isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    real_render = pipeline_module.render_dataset

    def flaky_render(dataset, **kwargs):
        if dataset.name == "raw_data":
            raise LayoutError("no room")
        return real_render(dataset, **kwargs)

    monkeypatch.setattr(pipeline_module, "render_dataset", flaky_render)
    mailer = FakeMailer()

    result = _pipeline(mailer=mailer).run(_profile(), today=TODAY, out_dir=tmp_path)

    assert not result.ok
    assert "raw_data" in result.failed
    assert [doc.name for doc in result.documents] == ["zeiten_03_2025"]
    assert mailer.sent[0][1] == ["zeiten_03_2025.pdf"]


def test_parallel_rendering_keeps_order(tmp_path: Path) -> None:
    tables = {f"zeiten_{index:02d}_2025": [{"id": n} for n in range(index * 10)] for index in range(1, 13)}
    profile = _profile(
        static_tables=[],
        dynamic_tables=DynamicTableSettings(current_month_only=False),
        render=RenderSettings(workers=4),
    )

    result = _pipeline(source=FakeSource(tables)).run(profile, today=TODAY, out_dir=tmp_path)

    assert [doc.name for doc in result.documents] == sorted(tables)
    assert [doc.row_count for doc in result.documents] == [len(tables[name]) for name in sorted(tables)]


def test_delivery_failure_aborts_run(tmp_path: Path) -> None:
    storage = FakeStorage()
    pipeline = _pipeline(mailer=FakeMailer(error=DeliveryError("SendGrid rejected the message")), storage=storage)

    with pytest.raises(DeliveryError):
        pipeline.run(_profile(), today=TODAY, out_dir=tmp_path)
    assert storage.stored == []


def test_preview_run_keeps_files_and_skips_maintenance(tmp_path: Path) -> None:
    source = FakeSource(_tables())

    result = _pipeline(source=source).run(_profile(), today=TODAY, out_dir=tmp_path, send_mail=False, upload=False)

    assert sorted(path.name for path in tmp_path.glob("*.pdf")) == ["raw_data.pdf", "zeiten_03_2025.pdf"]
    assert len(result.written) == 2
    assert source.rpc_calls == []
    assert result.rpc_results == {}
    assert result.maintenance_skipped


def test_mailed_but_not_uploaded_skips_maintenance(tmp_path: Path) -> None:
    source, mailer = FakeSource(_tables()), FakeMailer()

    result = _pipeline(source=source, mailer=mailer).run(_profile(), today=TODAY, out_dir=tmp_path, upload=False)

    assert result.mailed
    assert len(list(tmp_path.glob("*.pdf"))) == 2
    assert source.rpc_calls == []
    assert result.maintenance_skipped


def test_profile_without_storage_still_runs_maintenance(tmp_path: Path) -> None:
    source = FakeSource(_tables())
    profile = _profile(storage=StorageSettings(enabled=False))

    result = _pipeline(source=source).run(profile, today=TODAY, out_dir=tmp_path)

    assert result.uploaded == []
    assert len(list(tmp_path.glob("*.pdf"))) == 2
    assert source.rpc_calls == ["update_monthly_freizeitkonto"]
    assert not result.maintenance_skipped


class FlakyStorage(FakeStorage):
    def store(self, document) -> str:
        if self.stored:
            raise StorageError(f"upload of {document.filename} failed")
        return super().store(document)


def test_storage_failure_keeps_files_not_yet_uploaded(tmp_path: Path) -> None:
    source = FakeSource(_tables())

    with pytest.raises(StorageError):
        _pipeline(source=source, storage=FlakyStorage()).run(_profile(), today=TODAY, out_dir=tmp_path)

    assert [path.name for path in tmp_path.glob("*.pdf")] == ["zeiten_03_2025.pdf"]
    assert source.rpc_calls == []


def test_unknown_font_fails_before_collecting(tmp_path: Path) -> None:
    source = FakeSource(_tables())
    profile = _profile(render=RenderSettings(font=str(tmp_path / "fehlt.ttf")))

    with pytest.raises(ConfigError, match="fehlt.ttf"):
        _pipeline(source=source).run(profile, today=TODAY, out_dir=tmp_path)
    assert list(tmp_path.glob("*.pdf")) == []

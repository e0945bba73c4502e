from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable

from chronopilot.services.delivery.base import IMailer, IStorage, mailer_from_config, storage_from_config
from chronopilot.services.source.base import IDataSource, source_from_config
from chronopilot_pdf import (
    DEFAULT_STYLE,
    Dataset,
    FontError,
    LayoutError,
    RenderedDocument,
    ReportStyle,
    register_ttf_family,
    render_dataset,
)

from .errors import ConfigError, DataSourceError, RenderError
from .logger import get_logger
from .profiles import Profile, ensure_work_dirs, resolve_work_path


ProgressCB = Callable[[str, str], None]


@dataclass
class PipelineResult:
    profile: str
    documents: list[RenderedDocument] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)
    written: list[str] = field(default_factory=list)
    uploaded: list[str] = field(default_factory=list)
    mailed: bool = False
    rpc_results: dict[str, Any] = field(default_factory=dict)
    maintenance_skipped: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed


def report_style(font: str | None, font_bold: str | None = None) -> ReportStyle:
    """Return the report style, drawing with the TrueType pair when ``font`` is set.

    The standard PDF fonts only cover WinAnsi; names or notes outside it need
    an embedded font.
    """

    if not font:
        return DEFAULT_STYLE
    try:
        typography = register_ttf_family(
            resolve_work_path(font), resolve_work_path(font_bold) if font_bold else None
        )
    except FontError as exc:
        raise ConfigError(str(exc)) from exc
    return ReportStyle(palette=DEFAULT_STYLE.palette, typography=typography, texts=DEFAULT_STYLE.texts)


def render_one(
    dataset: Dataset,
    *,
    today: date,
    legacy_row_metrics: bool,
    style: ReportStyle = DEFAULT_STYLE,
) -> RenderedDocument:
    """Render ``dataset``, turning layout failures into :class:`RenderError`."""

    try:
        return render_dataset(dataset, style=style, today=today, legacy_row_metrics=legacy_row_metrics)
    except (LayoutError, ValueError) as exc:
        raise RenderError(f"{dataset.name}: {exc}") from exc


class ReportPipeline:
    """Coordinates Collect -> Render -> Mail -> Upload -> Maintenance steps."""

    def __init__(
        self,
        source: IDataSource | None = None,
        mailer: IMailer | None = None,
        storage: IStorage | None = None,
        logger=None,
    ) -> None:
        self.logger = logger or get_logger()
        self.source = source
        self.mailer = mailer
        self.storage = storage

    def run(
        self,
        profile: Profile,
        *,
        today: date | None = None,
        out_dir: Path | None = None,
        send_mail: bool = True,
        upload: bool = True,
        keep_local: bool | None = None,
        progress_cb: ProgressCB | None = None,
    ) -> PipelineResult:
        def progress(stage: str, detail: str = "") -> None:
            if progress_cb:
                progress_cb(stage, detail)
            self.logger.info("%s - %s", stage, detail)

        today = today or date.today()
        keep = profile.render.keep_local if keep_local is None else keep_local
        if out_dir is None:
            ensure_work_dirs()
            out_dir = resolve_work_path(profile.render.output_dir)
        style = report_style(profile.render.font, profile.render.font_bold)
        result = PipelineResult(profile=profile.name)
        source = self.source or source_from_config(profile.source)

        # 1. Collect
        progress("1/5 Sammeln", "Tabellen ermitteln")
        names = list(profile.static_tables)
        if profile.dynamic_tables is not None:
            for name in source.list_dynamic_tables(profile.dynamic_tables, today):
                if name not in names:
                    names.append(name)
        datasets: list[Dataset] = []
        for name in names:
            try:
                rows = source.fetch_rows(name)
            except DataSourceError as exc:
                self.logger.error("Skipping table %s: %s", name, exc)
                result.skipped[name] = str(exc)
                continue
            datasets.append(Dataset.from_rows(name, rows))
        progress("1/5 Sammeln", f"{len(datasets)} von {len(names)} Tabellen geladen")

        # 2. Render
        progress("2/5 Rendern", f"{len(datasets)} Dokumente")
        for dataset, outcome in self._render_all(datasets, profile, today, style):
            if isinstance(outcome, RenderedDocument):
                path = outcome.write_to(out_dir)
                result.documents.append(outcome)
                result.written.append(str(path))
            else:
                self.logger.error("Rendering %s failed", dataset.name, exc_info=outcome)
                result.failed[dataset.name] = str(outcome)
        progress("2/5 Rendern", f"fertig: {len(result.documents)}, fehlerhaft: {len(result.failed)}")

        # 3. Mail
        if send_mail and profile.mail.enabled and result.documents:
            progress("3/5 Versand", f"{len(result.documents)} Anhänge")
            mailer = self.mailer or mailer_from_config(profile.mail)
            mailer.send(profile.mail.subject, profile.mail.body, result.documents)
            result.mailed = True
        else:
            progress("3/5 Versand", "übersprungen")

        # 4. Upload, removing each local copy once storage accepted it
        if upload and profile.storage.enabled and result.documents:
            progress("4/5 Ablage", "Dokumente hochladen")
            storage = self.storage or storage_from_config(profile.storage)
            kept: list[str] = []
            for document, written in zip(result.documents, list(result.written)):
                result.uploaded.append(storage.store(document))
                if keep:
                    kept.append(written)
                else:
                    Path(written).unlink(missing_ok=True)
            result.written = kept
        else:
            progress("4/5 Ablage", "übersprungen")

        # 5. Maintenance, only after every enabled delivery step took place
        if not profile.post_run_rpcs:
            return result
        mail_done = result.mailed or not profile.mail.enabled
        storage_done = not profile.storage.enabled or (
            bool(result.documents) and len(result.uploaded) == len(result.documents)
        )
        if not (mail_done and storage_done):
            progress("5/5 Wartung", "übersprungen")
            result.maintenance_skipped = True
            return result
        for rpc in profile.post_run_rpcs:
            progress("5/5 Wartung", rpc)
            result.rpc_results[rpc] = source.call_rpc(rpc)

        return result

    def _render_all(self, datasets: list[Dataset], profile: Profile, today: date, style: ReportStyle):
        legacy = profile.render.legacy_row_metrics

        def attempt(dataset: Dataset) -> RenderedDocument | Exception:
            try:
                return render_one(dataset, today=today, legacy_row_metrics=legacy, style=style)
            except Exception as exc:  # noqa: BLE001
                return exc

        workers = min(profile.render.workers, max(1, len(datasets)))
        if workers <= 1:
            outcomes = [attempt(dataset) for dataset in datasets]
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="render") as pool:
                outcomes = list(pool.map(attempt, datasets))
        return zip(datasets, outcomes)

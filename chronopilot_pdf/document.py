"""Document assembly: one dataset in, one finalized PDF out."""

# Module responsibilities:
# - Define the immutable Dataset input and RenderedDocument output types.
# - Open a fresh canvas per dataset, draw the title and table, and finalize the bytes.
# - Keep every render self-contained so datasets can be rendered concurrently.

from __future__ import annotations

import io
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from .canvas import DocumentInfo, PageCanvas
from .cursor import Cursor
from .frame import draw_header, report_title
from .geometry import DEFAULT_GEOMETRY, PageGeometry
from .measure import TextMeasurer
from .style import DEFAULT_STYLE, ReportStyle
from .table import TableRenderer
from .utils.log import get_logger

logger = get_logger("document")

PDF_EXTENSION = ".pdf"
PDF_MEDIA_TYPE = "application/pdf"


@dataclass(frozen=True, slots=True)
class Dataset:
    """A named table of rows; the column set comes from the first row."""

    name: str
    rows: tuple[Mapping[str, Any], ...] = field(default_factory=tuple)

    @classmethod
    def from_rows(cls, name: str, rows: Iterable[Mapping[str, Any]] | None) -> "Dataset":
        frozen = tuple(MappingProxyType(dict(row)) for row in (rows or ()))
        return cls(name=name, rows=frozen)

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True, slots=True)
class RenderedDocument:
    """Finalized PDF bytes of one dataset."""

    name: str
    content: bytes
    page_count: int
    row_count: int

    @property
    def filename(self) -> str:
        return f"{self.name}{PDF_EXTENSION}"

    @property
    def media_type(self) -> str:
        return PDF_MEDIA_TYPE

    def write_to(self, directory: Path) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.filename
        path.write_bytes(self.content)
        return path


def render_dataset(
    dataset: Dataset,
    geometry: PageGeometry = DEFAULT_GEOMETRY,
    *,
    style: ReportStyle = DEFAULT_STYLE,
    today: Optional[date] = None,
    legacy_row_metrics: bool = False,
    measurer: Optional[TextMeasurer] = None,
) -> RenderedDocument:
    """Render ``dataset`` into a paginated PDF.

    Args:
        dataset: Rows to lay out.
        geometry: Page size, margins and spacing constants.
        style: Colors, fonts and fixed texts.
        today: Date shown in the title; defaults to the render-time clock.
        legacy_row_metrics: Measure row heights at the fixed legacy wrap
            width instead of the planned column widths.
        measurer: Text measurement helper; built from ``geometry`` if omitted.

    Returns:
        The finalized document. Nothing is returned for a partially drawn
        document: any drawing error propagates to the caller.
    """

    today = today or date.today()
    measurer = measurer or TextMeasurer(geometry.line_spacing)
    buffer = io.BytesIO()
    surface = PageCanvas(
        buffer,
        geometry,
        measurer,
        info=DocumentInfo(
            title=report_title(dataset.name, today, style),
            author=style.texts.brand,
            subject=dataset.name,
        ),
    )
    cursor = Cursor(y=geometry.margin_top)

    draw_header(surface, cursor, dataset.name, today=today, measurer=measurer, style=style)
    renderer = TableRenderer(surface, measurer, style, today=today, legacy_row_metrics=legacy_row_metrics)
    summary = renderer.render(dataset.name, dataset.rows, cursor)
    surface.finish()

    document = RenderedDocument(
        name=dataset.name,
        content=buffer.getvalue(),
        page_count=summary.page_count,
        row_count=summary.row_count,
    )
    logger.info(
        "Rendered dataset",
        extra={
            "dataset": dataset.name,
            "rows": summary.row_count,
            "pages": summary.page_count,
            "clamped_rows": summary.clamped_rows,
            "bytes": len(document.content),
        },
    )
    return document


__all__ = ["Dataset", "RenderedDocument", "render_dataset", "PDF_EXTENSION", "PDF_MEDIA_TYPE"]

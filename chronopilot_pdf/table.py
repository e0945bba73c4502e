"""Table rendering and pagination."""

# Module responsibilities:
# - Draw the column header band and the zebra-striped data rows of one dataset.
# - Break pages before a row would reach the footer band, repeating title and header band.
# - Keep every row on a single page; a row taller than a fresh page is clamped and ellipsized.

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date
from typing import List, Sequence

from .canvas import DrawingSurface, draw_lines
from .cursor import Cursor
from .formatting import format_cell
from .frame import draw_footer, draw_header
from .layout import ColumnPlan, Row, calculate_row_metrics, derive_columns, plan_columns
from .measure import TextMeasurer
from .style import ReportStyle
from .utils.log import get_logger

logger = get_logger("table")


class LayoutError(RuntimeError):
    """Raised when the page geometry leaves no room for table rows."""


class RenderState(enum.Enum):
    IDLE = "idle"
    HEADER_DRAWN = "header_drawn"
    ROWS_STREAMING = "rows_streaming"
    FINALIZED = "finalized"


@dataclass(frozen=True, slots=True)
class TableSummary:
    """Outcome of one table render."""

    row_count: int
    page_count: int
    page_breaks: int
    clamped_rows: int
    plan: ColumnPlan | None


class TableRenderer:
    """Lay out the rows of one dataset onto a drawing surface.

    The renderer owns no page state between calls; the :class:`Cursor`
    passed to :meth:`render` carries the write position and page number.
    """

    def __init__(
        self,
        surface: DrawingSurface,
        measurer: TextMeasurer,
        style: ReportStyle,
        *,
        today: date,
        legacy_row_metrics: bool = False,
    ) -> None:
        self.surface = surface
        self.measurer = measurer
        self.style = style
        self.today = today
        self.legacy_row_metrics = legacy_row_metrics
        self.state = RenderState.IDLE

    @property
    def geometry(self):
        return self.surface.geometry

    def render(self, dataset_name: str, rows: Sequence[Row], cursor: Cursor) -> TableSummary:
        columns = derive_columns(rows)
        if not columns:
            self._draw_notice(cursor)
            self.state = RenderState.FINALIZED
            return TableSummary(row_count=len(rows), page_count=cursor.page_number, page_breaks=0, clamped_rows=0, plan=None)

        geometry = self.geometry
        typo = self.style.typography
        plan = plan_columns(
            columns,
            rows,
            geometry.table_width,
            self.measurer,
            typography=typo,
            padding=geometry.cell_padding,
        )
        band_height = self._header_band_height(plan)
        self._draw_header_band(plan, band_height, cursor)
        self.state = RenderState.HEADER_DRAWN

        limit = geometry.content_bottom
        page_breaks = 0
        clamped = 0
        rows_on_page = 0
        for index, row in enumerate(rows):
            self.state = RenderState.ROWS_STREAMING
            height = calculate_row_metrics(
                plan,
                row,
                self.measurer,
                geometry=geometry,
                typography=typo,
                legacy=self.legacy_row_metrics,
            ).height
            if cursor.y + height > limit and rows_on_page:
                self._break_page(dataset_name, plan, band_height, cursor)
                page_breaks += 1
                rows_on_page = 0
            if cursor.y + height > limit:
                available = limit - cursor.y
                if available < geometry.min_row_height:
                    raise LayoutError(
                        f"No room for table rows on page {cursor.page_number}: "
                        f"{available:.1f}pt left above the footer band"
                    )
                logger.warning(
                    "Row taller than a page, clamping",
                    extra={"dataset": dataset_name, "row": index, "height": height, "available": available},
                )
                height = available
                clamped += 1
            self._draw_row(plan, row, index, height, cursor)
            cursor.advance(height)
            rows_on_page += 1

        draw_footer(self.surface, cursor.page_number, style=self.style)
        self.state = RenderState.FINALIZED
        return TableSummary(
            row_count=len(rows),
            page_count=cursor.page_number,
            page_breaks=page_breaks,
            clamped_rows=clamped,
            plan=plan,
        )

    # Internal helpers -------------------------------------------------

    def _draw_notice(self, cursor: Cursor) -> None:
        geometry = self.geometry
        typo = self.style.typography
        self.surface.text_line(
            self.style.texts.no_data,
            geometry.margin_left,
            cursor.y,
            font=typo.bold,
            size=typo.notice_size,
            color=self.style.palette.alert,
            align="center",
            width=geometry.table_width,
        )
        cursor.advance(self.measurer.leading(typo.notice_size))

    def _header_band_height(self, plan: ColumnPlan) -> float:
        typo = self.style.typography
        inset = self.geometry.cell_inset
        heights = [
            self.measurer.height(column.name, typo.bold, typo.column_header_size, column.width - 2 * inset)
            for column in plan
        ]
        return max(heights) + self.geometry.header_band_padding

    def _draw_header_band(self, plan: ColumnPlan, band_height: float, cursor: Cursor) -> None:
        geometry = self.geometry
        palette = self.style.palette
        typo = self.style.typography
        inset = geometry.cell_inset
        top = cursor.y
        left = geometry.margin_left

        self.surface.fill_rect(left, top, geometry.table_width, band_height, palette.accent)
        for x, column in zip(plan.offsets(left), plan):
            label_width = column.width - 2 * inset
            lines = self.measurer.wrap(column.name, typo.bold, typo.column_header_size, label_width)
            draw_lines(
                self.surface,
                self.measurer,
                lines,
                x + inset,
                top + 2 * inset,
                font=typo.bold,
                size=typo.column_header_size,
                color=palette.header_text,
            )
        self.surface.stroke_rect(left, top, geometry.table_width, band_height, palette.divider, 2)
        self._draw_dividers(plan, top, band_height)
        cursor.advance(band_height)

    def _draw_row(self, plan: ColumnPlan, row: Row, index: int, height: float, cursor: Cursor) -> None:
        geometry = self.geometry
        palette = self.style.palette
        typo = self.style.typography
        inset = geometry.cell_inset
        top = cursor.y
        left = geometry.margin_left

        fill = palette.zebra if index % 2 == 0 else palette.row
        self.surface.fill_rect(left, top, geometry.table_width, height, fill)
        for x, column in zip(plan.offsets(left), plan):
            text = format_cell(row.get(column.name), self.style.texts.placeholder)
            lines = self._fit_lines(text, column.width - 2 * inset, height)
            draw_lines(
                self.surface,
                self.measurer,
                lines,
                x + inset,
                top + inset,
                font=typo.regular,
                size=typo.body_size,
                color=palette.body,
            )
        self.surface.stroke_rect(left, top, geometry.table_width, height, palette.divider, 1)
        self._draw_dividers(plan, top, height)

    def _fit_lines(self, text: str, width: float, row_height: float) -> List[str]:
        """Wrap ``text`` to ``width`` and keep the lines that fit the row."""

        typo = self.style.typography
        lines = self.measurer.wrap(text, typo.regular, typo.body_size, width)
        leading = self.measurer.leading(typo.body_size)
        capacity = max(1, int((row_height - 2 * self.geometry.cell_inset) // leading))
        if len(lines) <= capacity:
            return lines
        kept = lines[:capacity]
        kept[-1] = self.measurer.ellipsize(kept[-1], typo.regular, typo.body_size, width, force=True)
        return kept

    def _draw_dividers(self, plan: ColumnPlan, top: float, height: float) -> None:
        divider = self.style.palette.divider
        for x in plan.offsets(self.geometry.margin_left)[1:]:
            self.surface.line(x, top, x, top + height, divider, 1)

    def _break_page(self, dataset_name: str, plan: ColumnPlan, band_height: float, cursor: Cursor) -> None:
        draw_footer(self.surface, cursor.page_number, style=self.style)
        self.surface.new_page()
        cursor.next_page(self.geometry.margin_top)
        draw_header(
            self.surface,
            cursor,
            dataset_name,
            today=self.today,
            measurer=self.measurer,
            style=self.style,
        )
        self._draw_header_band(plan, band_height, cursor)
        logger.debug("Page break", extra={"dataset": dataset_name, "page": cursor.page_number})


__all__ = ["LayoutError", "RenderState", "TableSummary", "TableRenderer"]

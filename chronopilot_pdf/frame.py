"""Per-page chrome: report title banner and page number footer."""

from __future__ import annotations

from datetime import date

from .canvas import DrawingSurface, draw_lines
from .cursor import Cursor
from .formatting import format_table_name, month_label
from .measure import TextMeasurer
from .style import ReportStyle


def report_title(dataset_name: str, today: date, style: ReportStyle) -> str:
    return f"{style.texts.brand} - {format_table_name(dataset_name)} - {month_label(today)}"


def draw_header(
    surface: DrawingSurface,
    cursor: Cursor,
    dataset_name: str,
    *,
    today: date,
    measurer: TextMeasurer,
    style: ReportStyle,
) -> None:
    """Draw the centered title and its rule at the cursor, then move below them."""

    geometry = surface.geometry
    typo = style.typography
    width = geometry.table_width
    lines = measurer.wrap(report_title(dataset_name, today, style), typo.bold, typo.title_size, width)
    used = draw_lines(
        surface,
        measurer,
        lines,
        geometry.margin_left,
        cursor.y,
        font=typo.bold,
        size=typo.title_size,
        color=style.palette.body,
        align="center",
        width=width,
    )
    cursor.advance(used)
    rule_y = cursor.y + 5
    surface.line(geometry.margin_left, rule_y, geometry.right_edge, rule_y, style.palette.divider, 1)
    cursor.advance(measurer.leading(typo.title_size))


def draw_footer(surface: DrawingSurface, page_number: int, *, style: ReportStyle) -> None:
    """Draw the footer rule and ``Seite <n>`` at a fixed offset above the bottom margin."""

    geometry = surface.geometry
    footer_y = geometry.footer_y
    surface.line(geometry.margin_left, footer_y, geometry.right_edge, footer_y, style.palette.divider, 1)
    surface.text_line(
        style.texts.page(page_number),
        geometry.margin_left,
        footer_y + 5,
        font=style.typography.regular,
        size=style.typography.footer_size,
        color=style.palette.footer,
        align="center",
        width=geometry.table_width,
    )


__all__ = ["report_title", "draw_header", "draw_footer"]

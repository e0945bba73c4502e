"""`chronopilot_pdf` lays out tabular datasets as paginated PDF reports."""

# Module responsibilities:
# - Re-export the document assembler, input/output types and formatting helpers
#   so the application and tools share one stable API surface.

from __future__ import annotations

from .cursor import Cursor
from .document import Dataset, RenderedDocument, render_dataset
from .fonts import FontError, register_ttf_family
from .formatting import format_cell, format_date, format_table_name, month_label
from .geometry import DEFAULT_GEOMETRY, PageGeometry
from .layout import ColumnPlan, ColumnSpec, RowMetrics, calculate_row_metrics, plan_columns
from .measure import TextMeasurer
from .style import DEFAULT_STYLE, Palette, ReportStyle, ReportTexts, Typography
from .table import LayoutError, RenderState, TableRenderer, TableSummary

__all__ = [
    "Cursor",
    "Dataset",
    "RenderedDocument",
    "render_dataset",
    "FontError",
    "register_ttf_family",
    "format_cell",
    "format_date",
    "format_table_name",
    "month_label",
    "DEFAULT_GEOMETRY",
    "PageGeometry",
    "ColumnPlan",
    "ColumnSpec",
    "RowMetrics",
    "calculate_row_metrics",
    "plan_columns",
    "TextMeasurer",
    "DEFAULT_STYLE",
    "Palette",
    "ReportStyle",
    "ReportTexts",
    "Typography",
    "LayoutError",
    "RenderState",
    "TableRenderer",
    "TableSummary",
]

__version__ = "0.1.0"

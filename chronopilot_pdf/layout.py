"""Column width planning and row height metrics."""

# Module responsibilities:
# - Derive the column list of a dataset from its first row.
# - Size columns from header and cell text widths, then fit them to the table width.
# - Compute the rendered height of a row from its wrapped cell texts.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, List, Mapping, Sequence

from .formatting import format_cell, stringify
from .geometry import PageGeometry
from .measure import TextMeasurer
from .style import Typography

Row = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class ColumnSpec:
    name: str
    width: float


@dataclass(frozen=True, slots=True)
class ColumnPlan:
    """Final per-column widths of one dataset's table."""

    columns: tuple[ColumnSpec, ...]

    def __iter__(self) -> Iterator[ColumnSpec]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    @property
    def names(self) -> List[str]:
        return [column.name for column in self.columns]

    @property
    def widths(self) -> List[float]:
        return [column.width for column in self.columns]

    @property
    def total_width(self) -> float:
        return sum(self.widths)

    def offsets(self, left: float) -> List[float]:
        """Left x position of every column when the table starts at ``left``."""

        positions: List[float] = []
        cursor = left
        for column in self.columns:
            positions.append(cursor)
            cursor += column.width
        return positions


@dataclass(frozen=True, slots=True)
class RowMetrics:
    height: float
    cell_heights: tuple[float, ...]


def derive_columns(rows: Sequence[Row]) -> List[str]:
    """Column names in the key order of the first row."""

    if not rows:
        return []
    return [str(key) for key in rows[0].keys()]


def required_widths(
    columns: Sequence[str],
    rows: Sequence[Row],
    measurer: TextMeasurer,
    *,
    typography: Typography,
    padding: float,
) -> List[float]:
    """Widest of header label and raw cell texts per column, plus ``padding``."""

    widths: List[float] = []
    for column in columns:
        widest = measurer.width(column, typography.bold, typography.column_header_size)
        for row in rows:
            text = stringify(row.get(column))
            widest = max(widest, measurer.width(text, typography.regular, typography.body_size))
        widths.append(widest + padding)
    return widths


def fit_widths(required: Sequence[float], table_width: float) -> List[float]:
    """Spread surplus evenly, or shrink proportionally, so widths sum to ``table_width``."""

    if not required:
        return []
    total = sum(required)
    if total < table_width:
        extra = (table_width - total) / len(required)
        widths = [width + extra for width in required]
    else:
        scale = table_width / total
        widths = [width * scale for width in required]
    # Absorb floating point residue in the last column.
    widths[-1] += table_width - sum(widths)
    return widths


def plan_columns(
    columns: Sequence[str],
    rows: Sequence[Row],
    table_width: float,
    measurer: TextMeasurer,
    *,
    typography: Typography,
    padding: float,
) -> ColumnPlan:
    required = required_widths(columns, rows, measurer, typography=typography, padding=padding)
    widths = fit_widths(required, table_width)
    return ColumnPlan(tuple(ColumnSpec(name, width) for name, width in zip(columns, widths)))


def calculate_row_metrics(
    plan: ColumnPlan,
    row: Row,
    measurer: TextMeasurer,
    *,
    geometry: PageGeometry,
    typography: Typography,
    legacy: bool = False,
) -> RowMetrics:
    """Row height is ``max(min_row_height, tallest cell) + row_padding``.

    Cells are wrapped to their planned width minus the text insets. With
    ``legacy`` every cell is wrapped to ``geometry.legacy_measure_width`` and
    measured from its raw text instead.
    """

    tallest = geometry.min_row_height
    heights: List[float] = []
    for column in plan:
        value = row.get(column.name)
        if legacy:
            text = stringify(value)
            wrap_width = geometry.legacy_measure_width
        else:
            text = format_cell(value)
            wrap_width = column.width - 2 * geometry.cell_inset
        height = measurer.height(text, typography.regular, typography.body_size, wrap_width)
        heights.append(height)
        tallest = max(tallest, height)
    return RowMetrics(height=tallest + geometry.row_padding, cell_heights=tuple(heights))


__all__ = [
    "ColumnSpec",
    "ColumnPlan",
    "RowMetrics",
    "derive_columns",
    "required_widths",
    "fit_widths",
    "plan_columns",
    "calculate_row_metrics",
]

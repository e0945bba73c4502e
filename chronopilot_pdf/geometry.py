"""Page geometry for the A4 report layout."""

# Module responsibilities:
# - Hold the fixed page size, margins and spacing constants of the table layout.
# - Derive the usable table width and the lowest y a row may reach before the footer band.

from __future__ import annotations

from dataclasses import dataclass

from reportlab.lib.pagesizes import A4


@dataclass(frozen=True, slots=True)
class PageGeometry:
    """Fixed layout constants, in PDF points, measured from the page top.

    Attributes:
        page_width: Page width (A4 portrait by default).
        page_height: Page height.
        margin_top: Distance from the top edge to the title line.
        margin_right: Right margin.
        margin_bottom: Bottom margin.
        margin_left: Left margin; the table starts here.
        min_row_height: Lower bound applied to the tallest cell of a row.
        row_padding: Extra vertical space added to every row.
        footer_reserve: Space kept free above the bottom margin for the footer.
        footer_offset: Distance of the footer rule above the bottom margin.
        header_band_padding: Extra vertical space of the column header band.
        cell_padding: Horizontal padding added to every planned column width.
        cell_inset: Inset of cell text from the cell's left and top edges.
        line_spacing: Line height per point of font size.
        legacy_measure_width: Fixed wrap width used by the legacy row metrics.
    """

    page_width: float = A4[0]
    page_height: float = A4[1]
    margin_top: float = 50.0
    margin_right: float = 50.0
    margin_bottom: float = 50.0
    margin_left: float = 50.0
    min_row_height: float = 20.0
    row_padding: float = 15.0
    footer_reserve: float = 50.0
    footer_offset: float = 40.0
    header_band_padding: float = 20.0
    cell_padding: float = 20.0
    cell_inset: float = 5.0
    # Helvetica ascent + descent + line gap
    line_spacing: float = 1.156
    legacy_measure_width: float = 100.0

    @property
    def table_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def content_bottom(self) -> float:
        """Lowest y (from the page top) a row rectangle may reach."""

        return self.page_height - self.margin_bottom - self.footer_reserve

    @property
    def footer_y(self) -> float:
        return self.page_height - self.margin_bottom - self.footer_offset

    @property
    def right_edge(self) -> float:
        return self.page_width - self.margin_right


DEFAULT_GEOMETRY = PageGeometry()

__all__ = ["PageGeometry", "DEFAULT_GEOMETRY"]

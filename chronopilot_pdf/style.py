"""Colors, fonts and fixed texts of the ChronoPilot report."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Palette:
    accent: str = "#3498db"
    divider: str = "#bdc3c7"
    zebra: str = "#ecf0f1"
    row: str = "#ffffff"
    body: str = "#2c3e50"
    header_text: str = "#ffffff"
    footer: str = "#7f8c8d"
    alert: str = "#ff0000"


@dataclass(frozen=True, slots=True)
class Typography:
    regular: str = "Helvetica"
    bold: str = "Helvetica-Bold"
    title_size: float = 14
    column_header_size: float = 12
    body_size: float = 10
    footer_size: float = 10
    notice_size: float = 12


@dataclass(frozen=True, slots=True)
class ReportTexts:
    brand: str = "ChronoPilot Bericht"
    no_data: str = "Keine Daten verfügbar"
    page_label: str = "Seite {page}"
    placeholder: str = "-"

    def page(self, number: int) -> str:
        return self.page_label.format(page=number)


@dataclass(frozen=True, slots=True)
class ReportStyle:
    """Bundle of palette, typography and texts passed through the renderers."""

    palette: Palette = field(default_factory=Palette)
    typography: Typography = field(default_factory=Typography)
    texts: ReportTexts = field(default_factory=ReportTexts)


DEFAULT_STYLE = ReportStyle()

__all__ = ["Palette", "Typography", "ReportTexts", "ReportStyle", "DEFAULT_STYLE"]

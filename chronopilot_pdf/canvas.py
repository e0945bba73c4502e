"""Top-down drawing surface over a reportlab canvas."""

# Module responsibilities:
# - Translate the layout's top-of-page coordinates into PDF user space.
# - Offer the few primitives the renderers need: filled/stroked rects, rules and text lines.
# - Track the page count and finalize the document into the target stream.

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Dict, Optional, Protocol, Sequence

from reportlab.lib.colors import Color, HexColor
from reportlab.pdfgen import canvas as rl_canvas

from .geometry import PageGeometry
from .measure import TextMeasurer


class DrawingSurface(Protocol):
    """Drawing operations used by the frame and table renderers."""

    geometry: PageGeometry
    page_count: int

    def fill_rect(self, x: float, top: float, width: float, height: float, color: str) -> None: ...

    def stroke_rect(
        self, x: float, top: float, width: float, height: float, color: str, line_width: float
    ) -> None: ...

    def line(self, x1: float, top1: float, x2: float, top2: float, color: str, line_width: float) -> None: ...

    def text_line(
        self,
        text: str,
        x: float,
        top: float,
        *,
        font: str,
        size: float,
        color: str,
        align: str = "left",
        width: Optional[float] = None,
    ) -> None: ...

    def new_page(self) -> None: ...


@dataclass(frozen=True, slots=True)
class DocumentInfo:
    title: str = ""
    author: str = ""
    subject: str = ""


class PageCanvas:
    """reportlab-backed :class:`DrawingSurface` with the origin at the page top."""

    def __init__(
        self,
        target: BinaryIO,
        geometry: PageGeometry,
        measurer: TextMeasurer,
        *,
        info: DocumentInfo | None = None,
    ) -> None:
        self.geometry = geometry
        self.measurer = measurer
        self.page_count = 1
        self._colors: Dict[str, Color] = {}
        self._canvas = rl_canvas.Canvas(
            target,
            pagesize=(geometry.page_width, geometry.page_height),
            pageCompression=1,
        )
        info = info or DocumentInfo()
        if info.title:
            self._canvas.setTitle(info.title)
        if info.author:
            self._canvas.setAuthor(info.author)
        if info.subject:
            self._canvas.setSubject(info.subject)

    def _y(self, top: float) -> float:
        return self.geometry.page_height - top

    def _color(self, value: str) -> Color:
        color = self._colors.get(value)
        if color is None:
            color = HexColor(value)
            self._colors[value] = color
        return color

    def fill_rect(self, x: float, top: float, width: float, height: float, color: str) -> None:
        self._canvas.setFillColor(self._color(color))
        self._canvas.rect(x, self._y(top + height), width, height, stroke=0, fill=1)

    def stroke_rect(
        self, x: float, top: float, width: float, height: float, color: str, line_width: float
    ) -> None:
        self._canvas.setStrokeColor(self._color(color))
        self._canvas.setLineWidth(line_width)
        self._canvas.rect(x, self._y(top + height), width, height, stroke=1, fill=0)

    def line(self, x1: float, top1: float, x2: float, top2: float, color: str, line_width: float) -> None:
        self._canvas.setStrokeColor(self._color(color))
        self._canvas.setLineWidth(line_width)
        self._canvas.line(x1, self._y(top1), x2, self._y(top2))

    def text_line(
        self,
        text: str,
        x: float,
        top: float,
        *,
        font: str,
        size: float,
        color: str,
        align: str = "left",
        width: Optional[float] = None,
    ) -> None:
        """Draw one line of text whose top edge sits at ``top``."""

        baseline = self._y(top + self.measurer.ascent(font, size))
        self._canvas.setFont(font, size)
        self._canvas.setFillColor(self._color(color))
        if align == "center" and width is not None:
            self._canvas.drawCentredString(x + width / 2, baseline, text)
        else:
            self._canvas.drawString(x, baseline, text)

    def new_page(self) -> None:
        self._canvas.showPage()
        self.page_count += 1

    def finish(self) -> None:
        self._canvas.save()


def draw_lines(
    surface: DrawingSurface,
    measurer: TextMeasurer,
    lines: Sequence[str],
    x: float,
    top: float,
    *,
    font: str,
    size: float,
    color: str,
    align: str = "left",
    width: Optional[float] = None,
) -> float:
    """Draw ``lines`` one leading apart on ``surface``; returns the block height."""

    leading = measurer.leading(size)
    for index, line in enumerate(lines):
        surface.text_line(
            line,
            x,
            top + index * leading,
            font=font,
            size=size,
            color=color,
            align=align,
            width=width,
        )
    return len(lines) * leading


__all__ = ["DrawingSurface", "DocumentInfo", "PageCanvas", "draw_lines"]

"""Text measurement on top of reportlab's font metrics."""

# Module responsibilities:
# - Measure string widths and wrapped block heights for registered PDF fonts.
# - Wrap text to a width, hard-breaking words longer than the width.
# - Shorten a line with a trailing ellipsis so it fits a width.

from __future__ import annotations

from typing import List

from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import getAscentDescent, stringWidth

ELLIPSIS = "…"


class TextMeasurer:
    """Measure and wrap text for a fixed line spacing."""

    def __init__(self, line_spacing: float = 1.156) -> None:
        if line_spacing <= 0:
            raise ValueError("line_spacing must be positive")
        self.line_spacing = line_spacing

    def width(self, text: str, font: str, size: float) -> float:
        return stringWidth(text, font, size)

    def leading(self, size: float) -> float:
        return size * self.line_spacing

    def ascent(self, font: str, size: float) -> float:
        ascent, _descent = getAscentDescent(font, size)
        return ascent

    def wrap(self, text: str, font: str, size: float, max_width: float) -> List[str]:
        """Split ``text`` into lines no wider than ``max_width``.

        Explicit newlines are kept. A single word wider than ``max_width`` is
        broken between characters.
        """

        if not text:
            return []
        if max_width <= 0:
            return [text]
        lines: List[str] = []
        for line in simpleSplit(text, font, size, max_width):
            if self.width(line, font, size) <= max_width:
                lines.append(line)
            else:
                lines.extend(self._hard_break(line, font, size, max_width))
        return lines

    def height(self, text: str, font: str, size: float, max_width: float) -> float:
        """Height of ``text`` once wrapped to ``max_width``; zero for empty text."""

        return len(self.wrap(text, font, size, max_width)) * self.leading(size)

    def ellipsize(self, text: str, font: str, size: float, max_width: float, *, force: bool = False) -> str:
        """Return ``text`` shortened with a trailing ellipsis to fit ``max_width``.

        With ``force`` the ellipsis is appended even when ``text`` already fits,
        marking that following lines were dropped.
        """

        if not force and self.width(text, font, size) <= max_width:
            return text
        kept = text.rstrip()
        while kept and self.width(kept + ELLIPSIS, font, size) > max_width:
            kept = kept[:-1]
        if not kept and self.width(ELLIPSIS, font, size) > max_width:
            return ""
        return kept.rstrip() + ELLIPSIS

    def _hard_break(self, text: str, font: str, size: float, max_width: float) -> List[str]:
        pieces: List[str] = []
        current = ""
        for char in text:
            if current and self.width(current + char, font, size) > max_width:
                pieces.append(current)
                current = char.lstrip()
            else:
                current += char
        if current:
            pieces.append(current)
        return pieces


__all__ = ["TextMeasurer", "ELLIPSIS"]

"""Render cursor: vertical write position and current page number."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Cursor:
    """Mutable render state owned by a single dataset render."""

    y: float
    page_number: int = 1

    def advance(self, delta: float) -> None:
        self.y += delta

    def next_page(self, top: float) -> None:
        self.page_number += 1
        self.y = top


__all__ = ["Cursor"]

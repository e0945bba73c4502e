from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Service modules create the application logger on import; keep its file out of the tree.
os.environ.setdefault("CHRONOPILOT_LOG_DIR", tempfile.mkdtemp(prefix="chronopilot-logs-"))

from chronopilot_pdf import DEFAULT_GEOMETRY, PageGeometry, TextMeasurer


class RecordingSurface:
    """Drawing surface that records every primitive together with its page."""

    def __init__(self, geometry: PageGeometry = DEFAULT_GEOMETRY) -> None:
        self.geometry = geometry
        self.page_count = 1
        self.ops: list[dict[str, Any]] = []

    def _record(self, kind: str, **payload: Any) -> None:
        self.ops.append({"kind": kind, "page": self.page_count, **payload})

    def fill_rect(self, x, top, width, height, color) -> None:
        self._record("fill", x=x, top=top, width=width, height=height, color=color)

    def stroke_rect(self, x, top, width, height, color, line_width) -> None:
        self._record("stroke", x=x, top=top, width=width, height=height, color=color, line_width=line_width)

    def line(self, x1, top1, x2, top2, color, line_width) -> None:
        self._record("line", x1=x1, top1=top1, x2=x2, top2=top2, color=color, line_width=line_width)

    def text_line(self, text, x, top, *, font, size, color, align="left", width=None) -> None:
        self._record("text", text=text, x=x, top=top, font=font, size=size, color=color, align=align)

    def new_page(self) -> None:
        self.page_count += 1

    def of_kind(self, kind: str) -> list[dict[str, Any]]:
        return [op for op in self.ops if op["kind"] == kind]


@pytest.fixture
def measurer() -> TextMeasurer:
    return TextMeasurer(DEFAULT_GEOMETRY.line_spacing)


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()

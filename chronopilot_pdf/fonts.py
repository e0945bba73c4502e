"""TrueType font registration for text outside the standard PDF fonts."""

# Module responsibilities:
# - Register a regular/bold TTF pair with reportlab once per process.
# - Return the Typography that draws and measures with the registered pair.

from __future__ import annotations

import threading
from dataclasses import replace
from pathlib import Path
from typing import Optional

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont, TTFError

from .style import Typography
from .utils.log import get_logger

logger = get_logger("fonts")

DEFAULT_FAMILY = "ReportSans"

_LOCK = threading.Lock()


class FontError(ValueError):
    """Raised when a font file cannot be loaded."""


def _register(name: str, path: Path) -> None:
    if name in pdfmetrics.getRegisteredFontNames():
        return
    if not path.is_file():
        raise FontError(f"Font file not found: {path}")
    try:
        pdfmetrics.registerFont(TTFont(name, str(path)))
    except TTFError as exc:
        raise FontError(f"Unusable TrueType font {path}: {exc}") from exc
    logger.info("Registered font", extra={"font": name, "path": str(path)})


def register_ttf_family(
    regular: Path,
    bold: Optional[Path] = None,
    *,
    family: str = DEFAULT_FAMILY,
    base: Typography = Typography(),
) -> Typography:
    """Register ``regular`` (and ``bold``) and return a matching :class:`Typography`.

    Without a bold file the regular face is used for headers as well. Names
    are registered once; later calls with the same family reuse them.
    """

    bold_name = f"{family}-Bold"
    with _LOCK:
        _register(family, Path(regular))
        _register(bold_name, Path(bold) if bold else Path(regular))
    return replace(base, regular=family, bold=bold_name)


__all__ = ["FontError", "register_ttf_family", "DEFAULT_FAMILY"]

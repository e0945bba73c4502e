"""Display formatting for cell values, dataset names and report dates."""

# Module responsibilities:
# - Turn raw scalar cell values into the text drawn in the table (dates in German notation).
# - Derive human readable report titles from raw table names.
# - Never raise on odd input: fall back to the raw text or the placeholder.

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

PLACEHOLDER = "-"
DISPLAY_TIMEZONE = ZoneInfo("Europe/Berlin")

DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
MONTH_SUFFIX = re.compile(r"(.*)_\d{2}_\d{4}$")
WORD_SEPARATORS = re.compile(r"[\s_]+")

DATE_FORMAT = "%d.%m.%Y"
DATETIME_FORMAT = "%d.%m.%Y, %H:%M:%S"

GERMAN_MONTHS = (
    "Januar",
    "Februar",
    "März",
    "April",
    "Mai",
    "Juni",
    "Juli",
    "August",
    "September",
    "Oktober",
    "November",
    "Dezember",
)


def _parse_iso(text: str) -> Optional[datetime]:
    candidate = text.strip()
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(candidate)
    except ValueError:
        return None


def _localize(moment: datetime, tz: ZoneInfo) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(tz)


def format_date(value: Any, tz: ZoneInfo = DISPLAY_TIMEZONE) -> Any:
    """Format an ISO-8601 like date or date-time in German notation.

    Falsy values give an empty string. Values that do not parse are returned
    unchanged. Strings carrying a ``T`` separator include the time of day
    (24h clock); aware timestamps are shown in ``tz``.
    """

    if not value:
        return ""
    if isinstance(value, datetime):
        return _localize(value, tz).strftime(DATETIME_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)

    text = str(value)
    parsed = _parse_iso(text)
    if parsed is None:
        return value
    if "T" in text:
        return _localize(parsed, tz).strftime(DATETIME_FORMAT)
    return parsed.strftime(DATE_FORMAT)


def format_table_name(raw: Any) -> Any:
    """Strip a trailing ``_MM_YYYY`` suffix and title-case the remaining words.

    >>> format_table_name("Baustellenzeit_03_2025")
    'Baustellenzeit'
    >>> format_table_name("daily_summary")
    'daily_summary'
    """

    if not isinstance(raw, str):
        return raw
    match = MONTH_SUFFIX.match(raw)
    if not match:
        return raw
    words = [word for word in WORD_SEPARATORS.split(match.group(1)) if word]
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def month_label(moment: date) -> str:
    """Return the German month name and year, e.g. ``März 2025``."""

    return f"{GERMAN_MONTHS[moment.month - 1]} {moment.year}"


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value == ""


def stringify(value: Any) -> str:
    """Plain text form of a scalar; blanks become an empty string."""

    if _is_blank(value):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_cell(value: Any, placeholder: str = PLACEHOLDER) -> str:
    """Text drawn for a cell: dates reformatted, blanks as ``placeholder``."""

    if _is_blank(value):
        return placeholder
    if isinstance(value, (datetime, date)):
        return format_date(value)
    if isinstance(value, str) and DATE_PREFIX.match(value):
        return str(format_date(value)) or placeholder
    return stringify(value) or placeholder


__all__ = [
    "PLACEHOLDER",
    "DISPLAY_TIMEZONE",
    "GERMAN_MONTHS",
    "format_date",
    "format_table_name",
    "month_label",
    "stringify",
    "format_cell",
]

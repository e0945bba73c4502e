"""CLI demo rendering a synthetic time tracking table."""

# Module responsibilities:
# - Build a multi-page dataset resembling the monthly time entry export.
# - Render it offline and print the resulting page count and path.

from __future__ import annotations

import argparse
import random
import sys
from datetime import date, datetime, timedelta
from pathlib import Path

from chronopilot_pdf import Dataset, render_dataset
from chronopilot_pdf.utils.log import get_logger

logger = get_logger("tools.demo_report")

EMPLOYEES = ("Anna Schmidt", "Jonas Becker", "Leonie Wagner", "Mehmet Yilmaz")
NOTES = (
    "Baustelle Nord",
    "Montage Lüftungsanlage im zweiten Obergeschoss inklusive Abstimmung mit der Bauleitung",
    "",
    "Werkstatt",
    None,
)


def build_rows(count: int, month: date, seed: int) -> list[dict]:
    rng = random.Random(seed)
    rows = []
    for index in range(count):
        day = month.replace(day=1) + timedelta(days=index % 28)
        start = datetime(day.year, day.month, day.day, 7, rng.choice((0, 15, 30)))
        hours = rng.choice((4, 6, 8, 9))
        rows.append(
            {
                "id": index + 1,
                "mitarbeiter": rng.choice(EMPLOYEES),
                "datum": day.isoformat(),
                "start": start.isoformat(),
                "ende": (start + timedelta(hours=hours)).isoformat(),
                "stunden": hours,
                "pause": rng.choice((0, 0.5, 0.75)),
                "notiz": rng.choice(NOTES),
            }
        )
    return rows


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render a synthetic monthly report")
    parser.add_argument("--rows", type=int, default=120, help="Number of synthetic rows")
    parser.add_argument("--name", default=None, help="Dataset name; defaults to zeiten_MM_YYYY")
    parser.add_argument("--out", type=Path, default=Path("work/out"))
    parser.add_argument("--seed", type=int, default=7)
    parser.add_argument("--legacy-row-metrics", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or sys.argv[1:])
    today = date.today()
    name = args.name or f"zeiten_{today.month:02d}_{today.year}"

    try:
        dataset = Dataset.from_rows(name, build_rows(args.rows, today, args.seed))
        document = render_dataset(dataset, today=today, legacy_row_metrics=args.legacy_row_metrics)
        path = document.write_to(args.out)
    except Exception as exc:  # pylint: disable=broad-except
        logger.error("Demo report failed", extra={"error": str(exc)})
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Rows rendered: {document.row_count}")
    print(f"Pages: {document.page_count}")
    print(f"Output: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

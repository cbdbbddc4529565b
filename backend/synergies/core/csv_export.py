# synergies/core/csv_export.py
"""
Spreadsheet-friendly CSV for the French-locale back office.

Every field is quoted (embedded quotes doubled), fields are joined with ';',
lines with '\\n', and the payload starts with a UTF-8 byte-order mark so Excel
picks the right encoding.
"""
from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Any, Iterable, Sequence

from synergies.core.clock import utcnow

BOM = "\ufeff"
DELIMITER = ";"
MEDIA_TYPE = "text/csv; charset=utf-8"


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def build_csv(header: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    output = io.StringIO()
    writer = csv.writer(
        output,
        delimiter=DELIMITER,
        quotechar='"',
        doublequote=True,
        quoting=csv.QUOTE_ALL,
        lineterminator="\n",
    )
    writer.writerow([_cell(h) for h in header])
    for row in rows:
        writer.writerow([_cell(v) for v in row])

    # lines are joined with '\n', nothing after the last one
    return BOM + output.getvalue()[:-1]


def export_filename(prefix: str, now: datetime | None = None) -> str:
    now = now or utcnow()
    return f"{prefix}_{now.strftime('%Y-%m')}.csv"


def content_disposition(filename: str) -> str:
    return f'attachment; filename="{filename}"'

"""CSV serialization of outcome records."""

from __future__ import annotations

import csv
from pathlib import Path

from keyescrow.models import OutcomeRecord

COLUMNS = ["DeviceName", "ObjectId", "RecoveryKeyId", "ExecutionDate", "Status"]


def write_report(path: Path | str, records: list[OutcomeRecord]) -> Path:
    """Write the full outcome table in one pass. Returns the path written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=COLUMNS)
        writer.writeheader()
        for record in records:
            writer.writerow(record.as_row())
    return path

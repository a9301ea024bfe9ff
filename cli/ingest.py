"""CSV parsing for batch measurement uploads."""

from __future__ import annotations

import csv
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from services.dates import parse_timestamp

REQUIRED_COLUMNS = ("createdat", "value")


@dataclass
class ParsedBatch:
    """Rows ready to upload plus the rows that were rejected."""

    measurements: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def read_measurements_csv(path: Path) -> ParsedBatch:
    """Parse a ``createdAt,value`` CSV; bad rows are reported, not uploaded."""
    batch = ParsedBatch()
    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            raise ValueError("CSV file is missing a header row.")

        normalized = {name.lower().strip(): name for name in reader.fieldnames}
        missing = [column for column in REQUIRED_COLUMNS if column not in normalized]
        if missing:
            raise ValueError(f"CSV missing required columns: {', '.join(missing)}")

        created_col = normalized["createdat"]
        value_col = normalized["value"]

        for row_number, row in enumerate(reader, start=2):
            created_raw = (row.get(created_col) or "").strip()
            value_raw = (row.get(value_col) or "").strip()

            if not created_raw:
                batch.errors.append(f"row {row_number}: missing createdAt")
                continue
            try:
                created_at = parse_timestamp(created_raw)
            except ValueError:
                batch.errors.append(f"row {row_number}: invalid createdAt")
                continue

            if not value_raw:
                batch.errors.append(f"row {row_number}: missing value")
                continue
            try:
                value = float(value_raw)
            except ValueError:
                value = math.nan
            if not math.isfinite(value):
                batch.errors.append(f"row {row_number}: invalid numeric value")
                continue

            batch.measurements.append(
                {"createdAt": created_at.isoformat().replace("+00:00", "Z"), "value": value}
            )
    return batch

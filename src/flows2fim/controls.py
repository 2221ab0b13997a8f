"""Control table parsing."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path

from flows2fim.errors import ReadError, ShapeError

MIN_COLUMNS = 3


@dataclass(frozen=True)
class ControlRow:
    """A single reach/flow/boundary-condition selection."""

    reach_id: str
    flow_value: str
    boundary_condition: str


def read_controls(path: Path) -> tuple[ControlRow, ...]:
    """Read a controls CSV and return its data rows in file order.

    The first row is a header and is discarded. Columns past the third are
    ignored.
    """
    try:
        with Path(path).open("r", encoding="utf-8", newline="") as handle:
            records = list(csv.reader(handle, strict=True))
    except (OSError, UnicodeDecodeError) as exc:
        raise ReadError(f"Error opening controls file {path}: {exc}") from exc
    except csv.Error as exc:
        raise ReadError(f"Error reading CSV file {path}: {exc}") from exc

    records = [record for record in records if record]
    if len(records) < 2:
        raise ShapeError(f"No records in controls file {path}")

    rows: list[ControlRow] = []
    for line_number, record in enumerate(records[1:], start=2):
        if len(record) < MIN_COLUMNS:
            raise ShapeError(
                f"Not enough columns in controls file {path} at row {line_number}: "
                f"need at least {MIN_COLUMNS}, found {len(record)}"
            )
        reach_id, flow_value, boundary_condition = (field.strip() for field in record[:3])
        rows.append(ControlRow(reach_id, flow_value, boundary_condition))
    return tuple(rows)

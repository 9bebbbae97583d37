"""Report sinks writing CSV or JSON files."""

from __future__ import annotations

import csv
import json
import re
from pathlib import Path
from typing import Sequence


def table_filename(title: str, suffix: str) -> str:
    """'By Sender' -> 'by_sender.csv'."""
    return re.sub(r"[^a-z0-9]+", "_", title.lower()).strip("_") + suffix


class CsvSink:
    """Writes one CSV file per table into a directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.written: list[Path] = []

    def write_table(self, title: str, rows: Sequence[Sequence]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / table_filename(title, ".csv")
        with open(path, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerows(rows)
        self.written.append(path)


class JsonSink:
    """Collects tables and writes them as one JSON object on close().

    Decimal cells (the MB columns) are written as floats.
    """

    def __init__(self, output_path: str | Path) -> None:
        self.output_path = Path(output_path)
        self.tables: dict[str, list[list]] = {}

    def write_table(self, title: str, rows: Sequence[Sequence]) -> None:
        self.tables[title] = [list(row) for row in rows]

    def close(self) -> None:
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.output_path, "w") as f:
            json.dump(self.tables, f, indent=2, default=float)

    # --- context manager ---

    def __enter__(self) -> JsonSink:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if exc_type is None:
            self.close()

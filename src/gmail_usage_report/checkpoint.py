"""SQLite store for the oldest-date checkpoint between runs.

Only run metadata is kept; aggregates never outlive the run that built them.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from gmail_usage_report import constants
from gmail_usage_report.models import ScanRun

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    query TEXT,
    base_query TEXT,
    threads_scanned INTEGER,
    stop_reason TEXT,
    oldest_date TEXT,
    run_date TEXT
);
"""


class CheckpointStore:
    """Persistent record of past runs and the oldest message date they reached."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = Path(db_path or constants.CHECKPOINT_DB_PATH)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self.db_path))
        self._conn.row_factory = sqlite3.Row
        self._create_tables()

    def _create_tables(self) -> None:
        self._conn.executescript(_CREATE_TABLES_SQL)

    # --- public API ---

    def save_run(self, run: ScanRun) -> None:
        """Record a finished run."""
        with self._conn:
            self._conn.execute(
                "INSERT INTO runs (query, base_query, threads_scanned, stop_reason, oldest_date, run_date) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    run.query,
                    run.base_query,
                    run.threads_scanned,
                    run.stop_reason,
                    run.oldest_date.isoformat() if run.oldest_date else None,
                    run.run_date,
                ),
            )

    def load_latest(self) -> dict | None:
        """Return the most recent run as a dict, or None."""
        row = self._conn.execute("SELECT * FROM runs ORDER BY id DESC LIMIT 1").fetchone()
        return dict(row) if row else None

    def oldest_date(self, base_query: str | None = None) -> datetime | None:
        """Oldest thread date reached by recorded runs of ``base_query``.

        None looks across every query.
        """
        sql = "SELECT oldest_date FROM runs WHERE oldest_date IS NOT NULL"
        params: tuple = ()
        if base_query is not None:
            sql += " AND base_query = ?"
            params = (base_query,)
        rows = self._conn.execute(sql, params).fetchall()
        dates = [datetime.fromisoformat(r["oldest_date"]) for r in rows]
        return min(dates) if dates else None

    def clear(self) -> None:
        """Drop and recreate all tables."""
        self._conn.executescript("DROP TABLE IF EXISTS runs;")
        self._create_tables()

    def get_info(self) -> dict:
        """Return checkpoint statistics."""
        file_size = self.db_path.stat().st_size if self.db_path.exists() else 0
        latest = self.load_latest()
        run_count = self._conn.execute("SELECT COUNT(*) AS c FROM runs").fetchone()["c"]
        oldest = self.oldest_date()

        return {
            "db_file_size": file_size,
            "run_count": run_count,
            "last_run_date": latest["run_date"] if latest else None,
            "last_query": latest["query"] if latest else None,
            "oldest_date": oldest.isoformat() if oldest else None,
        }

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # --- context manager ---

    def __enter__(self) -> CheckpointStore:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()

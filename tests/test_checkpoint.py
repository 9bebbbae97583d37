"""Tests for the SQLite checkpoint store."""

from datetime import datetime, timezone

from gmail_usage_report.checkpoint import CheckpointStore
from gmail_usage_report.models import ScanRun


def _run(oldest, query="in:inbox", threads=10) -> ScanRun:
    return ScanRun(query=query, threads_scanned=threads, stop_reason="cap", oldest_date=oldest)


def test_save_and_load_latest(tmp_path):
    oldest = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    with CheckpointStore(db_path=tmp_path / "cp.db") as store:
        store.save_run(_run(oldest))
        latest = store.load_latest()

    assert latest["query"] == "in:inbox"
    assert latest["threads_scanned"] == 10
    assert latest["stop_reason"] == "cap"
    assert datetime.fromisoformat(latest["oldest_date"]) == oldest


def test_oldest_date_over_all_runs(tmp_path):
    a = datetime(2024, 3, 1, tzinfo=timezone.utc)
    b = datetime(2023, 7, 9, tzinfo=timezone.utc)
    with CheckpointStore(db_path=tmp_path / "cp.db") as store:
        store.save_run(_run(a))
        store.save_run(_run(b))
        store.save_run(_run(None))
        assert store.oldest_date() == b


def test_empty_store(tmp_path):
    with CheckpointStore(db_path=tmp_path / "cp.db") as store:
        assert store.load_latest() is None
        assert store.oldest_date() is None
        info = store.get_info()
    assert info["run_count"] == 0
    assert info["last_run_date"] is None


def test_persists_between_connections(tmp_path):
    db = tmp_path / "cp.db"
    with CheckpointStore(db_path=db) as store:
        store.save_run(_run(datetime(2022, 1, 1, tzinfo=timezone.utc)))
    with CheckpointStore(db_path=db) as store:
        info = store.get_info()
    assert info["run_count"] == 1
    assert info["oldest_date"].startswith("2022-01-01")
    assert info["db_file_size"] > 0


def test_clear(tmp_path):
    with CheckpointStore(db_path=tmp_path / "cp.db") as store:
        store.save_run(_run(datetime(2022, 1, 1, tzinfo=timezone.utc)))
        store.clear()
        assert store.load_latest() is None


def test_oldest_date_is_scoped_to_base_query(tmp_path):
    news = ScanRun(query="label:news", base_query="label:news", oldest_date=datetime(2019, 5, 5, tzinfo=timezone.utc))
    inbox = ScanRun(query="in:inbox", base_query="in:inbox", oldest_date=datetime(2023, 8, 1, tzinfo=timezone.utc))
    with CheckpointStore(db_path=tmp_path / "cp.db") as store:
        store.save_run(news)
        store.save_run(inbox)

        assert store.oldest_date("in:inbox") == datetime(2023, 8, 1, tzinfo=timezone.utc)
        assert store.oldest_date("label:news") == datetime(2019, 5, 5, tzinfo=timezone.utc)
        assert store.oldest_date("from:boss") is None
        assert store.oldest_date() == datetime(2019, 5, 5, tzinfo=timezone.utc)
        assert store.load_latest()["base_query"] == "in:inbox"

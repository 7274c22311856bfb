# tests/test_run_sync.py
import pytest

from models.sync import SyncReport, SyncStatus
from run_sync import parse_args, print_summary


def test_defaults_to_every_source():
    args = parse_args([])

    assert args.source == "all"
    assert args.database_url is None
    assert args.news_pages is None


def test_accepts_single_source_and_overrides():
    args = parse_args(["--source", "rectorat", "--database-url", "sqlite://", "--log-level", "DEBUG"])

    assert args.source == "rectorat"
    assert args.database_url == "sqlite://"
    assert args.log_level == "DEBUG"


def test_rejects_unknown_source():
    with pytest.raises(SystemExit):
        parse_args(["--source", "weather"])


def test_summary_lists_errors(capsys):
    report = SyncReport(source="news", created=2)
    report.record_error("https://vsau.org/novini/x: HTTP 404")
    report.finish(SyncStatus.COMPLETED)

    print_summary({"news": report})

    out = capsys.readouterr().out
    assert "created=2" in out
    assert "failed=1" in out
    assert "HTTP 404" in out

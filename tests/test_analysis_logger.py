"""Tests for run log files."""
import json

from helpers import StubEnrichmentClient
from part_lifecycle.services import analysis_logger
from part_lifecycle.services.row_processor import RowProcessor


def _finished_event(parts):
    events = []
    processor = RowProcessor(StubEnrichmentClient(responses={"P1": ConnectionError("boom")}))
    processor.subscribe(events.append)
    processor.load(parts)
    processor.start(blocking=True)
    return events[-1]


def test_log_run_results_writes_text_and_json(tmp_path, parts):
    event = _finished_event(parts)

    paths = analysis_logger.log_run_results(event, log_dir=str(tmp_path))

    assert len(paths) == 2
    with open(paths[0], encoding="utf-8") as f:
        text = f.read()
    assert "Completed: 3" in text
    assert "Failed: 1" in text
    assert "Part: P1" in text
    assert "Error: API Error" in text

    with open(paths[1], encoding="utf-8") as f:
        data = json.load(f)
    assert data["metadata"]["total"] == 4
    assert data["metadata"]["stopped"] is False
    assert [r["part"] for r in data["records"]] == ["P0", "P1", "P2", "P3"]


def test_subscriber_only_logs_finished_runs(tmp_path, monkeypatch, parts):
    monkeypatch.setattr("part_lifecycle.config.RUN_LOG_DIR", str(tmp_path))

    analysis_logger.run_log_subscriber({"type": "progress", "current": 1, "total": 4})
    assert list(tmp_path.iterdir()) == []

    analysis_logger.run_log_subscriber(_finished_event(parts))
    assert sorted(p.suffix for p in tmp_path.iterdir()) == [".json", ".txt"]

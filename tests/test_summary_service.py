"""Tests for the JSON upload summary."""

import json

from batch_uploader.models.upload_result import BatchCounters
from batch_uploader.services.summary_service import SUMMARY_FILENAME, SummaryService


def test_summary_counts_are_strings(dirs, logger):
    service = SummaryService(dirs["in_progress"], logger)

    assert service.write_summary("17-10-2024", BatchCounters(succeeded=3, failed=0))

    lines = (dirs["in_progress"] / SUMMARY_FILENAME).read_text().splitlines()
    assert json.loads(lines[0]) == {
        "17-10-2024": {"uploaded_documents": "3", "failed_documents": "0"}
    }


def test_repeated_runs_accumulate(dirs, logger):
    service = SummaryService(dirs["in_progress"], logger)
    service.write_summary("17-10-2024", BatchCounters(succeeded=2, failed=1))
    service.write_summary("17-10-2024", BatchCounters(succeeded=0, failed=1))
    service.write_summary("18-10-2024", BatchCounters(succeeded=5, failed=0))

    entries = service.read_summaries()
    assert len(entries) == 3
    assert entries[1]["17-10-2024"]["failed_documents"] == "1"
    assert entries[2]["18-10-2024"]["uploaded_documents"] == "5"


def test_missing_directory_is_created(tmp_path, logger):
    service = SummaryService(tmp_path / "new" / "in_progress", logger)
    assert service.write_summary("17-10-2024", BatchCounters())
    assert service.summary_path.exists()


def test_write_error_is_logged_not_raised(tmp_path, logger, caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a folder")
    service = SummaryService(blocker, logger)

    with caplog.at_level("ERROR"):
        assert service.write_summary("17-10-2024", BatchCounters()) is False
    assert "Error writing JSON summary" in caplog.text


def test_read_without_file(dirs, logger):
    assert SummaryService(dirs["in_progress"], logger).read_summaries() == []

"""Tests for the bounded retry policy."""

from pathlib import Path

import pytest

from batch_uploader.models.metadata_record import MetadataRecord
from batch_uploader.models.upload_result import OutcomeStatus, UploadAttempt, UploadTask
from batch_uploader.services.retrying_uploader import DEFAULT_MAX_ATTEMPTS, RetryingUploader


class ScriptedClient:
    """Returns the scripted attempts in order, repeating the last one."""

    def __init__(self, *successes):
        self.script = list(successes)
        self.calls = 0

    def upload(self, file_path, record):
        self.calls += 1
        index = min(self.calls, len(self.script)) - 1
        if self.script[index]:
            return UploadAttempt(success=True, status_code=201)
        return UploadAttempt(success=False, status_code=503, error="unavailable")


@pytest.fixture
def task(tmp_path):
    return UploadTask(
        file_path=tmp_path / "DOC-1.pdf",
        record=MetadataRecord("DOC-1"),
        batch_folder=Path(tmp_path),
    )


class TestRetryPolicy:
    def test_default_ceiling_is_four_attempts(self):
        assert DEFAULT_MAX_ATTEMPTS == 4

    def test_first_attempt_success(self, logger, task):
        client = ScriptedClient(True)
        outcome = RetryingUploader(client, logger).upload(task)
        assert outcome.status is OutcomeStatus.SUCCEEDED
        assert outcome.attempts == 1
        assert client.calls == 1

    def test_always_failing_stops_after_four_attempts(self, logger, task):
        client = ScriptedClient(False)
        outcome = RetryingUploader(client, logger).upload(task)
        assert outcome.status is OutcomeStatus.FAILED_AFTER_RETRIES
        assert outcome.attempts == 4
        assert client.calls == 4
        assert outcome.last_attempt.status_code == 503

    def test_success_on_last_allowed_attempt(self, logger, task):
        client = ScriptedClient(False, False, False, True)
        outcome = RetryingUploader(client, logger).upload(task)
        assert outcome.succeeded
        assert outcome.attempts == 4

    def test_success_after_retry_stops_retrying(self, logger, task):
        client = ScriptedClient(False, True, False)
        outcome = RetryingUploader(client, logger).upload(task)
        assert outcome.succeeded
        assert client.calls == 2

    def test_retries_are_logged_with_attempts_left(self, logger, task, caplog):
        with caplog.at_level("WARNING"):
            RetryingUploader(ScriptedClient(False), logger).upload(task)
        assert "Attempts left: 3" in caplog.text
        assert "Attempts left: 1" in caplog.text
        assert "Failed to upload: DOC-1.pdf" in caplog.text

    def test_invalid_ceiling(self, logger):
        with pytest.raises(ValueError):
            RetryingUploader(ScriptedClient(True), logger, max_attempts=0)


class TestBackoff:
    def test_no_delay_by_default(self, logger, task):
        sleeps = []
        RetryingUploader(ScriptedClient(False), logger, sleep=sleeps.append).upload(task)
        assert sleeps == []

    def test_backoff_keeps_attempt_ceiling(self, logger, task):
        sleeps = []
        client = ScriptedClient(False)
        outcome = RetryingUploader(
            client, logger, base_delay=1.0, max_delay=3.0, sleep=sleeps.append
        ).upload(task)

        assert outcome.attempts == 4
        assert client.calls == 4
        # One sleep between each pair of attempts, none after the last
        assert len(sleeps) == 3
        assert 0.5 <= sleeps[0] < 1.5
        assert 1.0 <= sleeps[1] < 3.0
        assert all(delay < 4.5 for delay in sleeps)

"""
Bounded retry policy around single upload attempts.

Every failed attempt is retried the same way, whatever the reason (transport
error, timeout or rejection by the repository), until the attempt ceiling is
reached. By default attempts follow each other immediately; a base delay
turns on exponential backoff with jitter without changing the ceiling.
"""

import random
import time
from typing import Callable, Optional

from batch_uploader.models.upload_result import (
    OutcomeStatus,
    UploadAttempt,
    UploadOutcome,
    UploadTask,
)

DEFAULT_MAX_ATTEMPTS = 4  # 1 initial attempt + 3 retries


class RetryingUploader:
    """Wraps an UploadClient and produces exactly one outcome per task."""

    def __init__(
        self,
        client,
        logger,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = 0.0,
        max_delay: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.client = client
        self.logger = logger
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep

    def _backoff_delay(self, attempt: int) -> float:
        """Delay after the given failed attempt (1-indexed); 0 when disabled."""
        if self.base_delay <= 0:
            return 0.0
        delay = min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)
        # Jitter factor in [0.5, 1.5)
        return delay * (0.5 + random.random())

    def upload(self, task: UploadTask) -> UploadOutcome:
        """Attempt the upload until it succeeds or the ceiling is reached."""
        name = task.file_path.name
        last_attempt: Optional[UploadAttempt] = None
        attempts = 0

        while attempts < self.max_attempts:
            attempts += 1
            last_attempt = self.client.upload(task.file_path, task.record)

            if last_attempt.success:
                if attempts > 1:
                    self.logger.info(f"Uploaded {name} on attempt {attempts}")
                return UploadOutcome(
                    status=OutcomeStatus.SUCCEEDED,
                    task=task,
                    attempts=attempts,
                    last_attempt=last_attempt,
                )

            attempts_left = self.max_attempts - attempts
            if attempts_left > 0:
                self.logger.warning(
                    f"Retrying upload for: {name} ({last_attempt.describe()}). "
                    f"Attempts left: {attempts_left}"
                )
                delay = self._backoff_delay(attempts)
                if delay > 0:
                    self._sleep(delay)

        self.logger.error(
            f"Failed to upload: {name} after {attempts} attempts ({last_attempt.describe()})"
        )
        return UploadOutcome(
            status=OutcomeStatus.FAILED_AFTER_RETRIES,
            task=task,
            attempts=attempts,
            last_attempt=last_attempt,
        )

    def close(self) -> None:
        """Release the client's connections after a batch."""
        self.client.close()

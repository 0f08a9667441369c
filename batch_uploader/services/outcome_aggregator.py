"""
Thread-safe accumulation of upload outcomes for one batch.
"""

import threading
from pathlib import Path
from typing import List, Set, Tuple

from batch_uploader.models.upload_result import BatchCounters, UploadOutcome


class OutcomeAggregator:
    """Collects outcomes into success/failure ledgers and counters.

    Recording an outcome also applies its filesystem side effect (delete on
    success, move to the failure folder otherwise) and writes the audit row,
    so a report entry and the file's location always agree. Only the
    ledger append and counter increment run under the lock; relocation and
    auditing for different documents proceed in parallel.

    Each task is recorded once. After close() no outcome is accepted, so a
    worker that outlives the batch barrier touches neither files nor audit.
    """

    def __init__(self, archive_service, logger, audit_service=None):
        self.archive_service = archive_service
        self.audit_service = audit_service
        self.logger = logger
        self._lock = threading.Lock()
        self._succeeded: List[UploadOutcome] = []
        self._failed: List[UploadOutcome] = []
        self._counters = BatchCounters()
        self._recorded: Set[Path] = set()
        self._closed = False

    def record(self, outcome: UploadOutcome) -> bool:
        """
        Classify one terminal outcome and apply its side effects.

        Returns:
            bool: False if the outcome was refused (batch closed or task
            already recorded)
        """
        with self._lock:
            if self._closed:
                self.logger.warning(
                    f"Ignoring late outcome for {outcome.file_path.name}: batch already closed"
                )
                return False
            if outcome.file_path in self._recorded:
                self.logger.warning(
                    f"Ignoring duplicate outcome for {outcome.file_path.name}"
                )
                return False
            self._recorded.add(outcome.file_path)
            if outcome.succeeded:
                self._succeeded.append(outcome)
                self._counters.succeeded += 1
            else:
                self._failed.append(outcome)
                self._counters.failed += 1

        if outcome.succeeded:
            self.logger.info(f"Successfully uploaded: {outcome.file_path.name}")
            self.archive_service.remove_processed_document(outcome.file_path)
        else:
            archived = self.archive_service.archive_failed_document(
                outcome.file_path, outcome.task.batch_name
            )
            if archived is None:
                # Classification stands even though the file did not move
                self.logger.error(
                    f"Failed document {outcome.file_path.name} left in place after relocation error"
                )

        self._audit(outcome)
        return True

    def close(self) -> None:
        """Stop accepting outcomes; called once the batch barrier is passed."""
        with self._lock:
            self._closed = True

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def _audit(self, outcome: UploadOutcome) -> None:
        if self.audit_service is None:
            return
        record = outcome.record
        if not self.audit_service.record_audit(
            record.document_type, record.affected_customer, outcome.status.value
        ):
            self.logger.warning(f"Audit not recorded for {outcome.file_path.name}")

    @property
    def succeeded(self) -> Tuple[UploadOutcome, ...]:
        with self._lock:
            return tuple(self._succeeded)

    @property
    def failed(self) -> Tuple[UploadOutcome, ...]:
        with self._lock:
            return tuple(self._failed)

    @property
    def counters(self) -> BatchCounters:
        """Snapshot of the counters."""
        with self._lock:
            return BatchCounters(
                succeeded=self._counters.succeeded, failed=self._counters.failed
            )

    @property
    def total(self) -> int:
        return self.counters.total

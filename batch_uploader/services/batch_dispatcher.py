"""
Batch dispatcher fanning document uploads out over a worker pool.
"""

from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from batch_uploader.errors import InvalidBatchFolderError
from batch_uploader.models.upload_result import (
    BatchCounters,
    BatchResult,
    OutcomeStatus,
    UploadAttempt,
    UploadOutcome,
    UploadTask,
)
from batch_uploader.services.archive_service import DOCUMENTS_FOLDER
from batch_uploader.services.metadata_index import MetadataIndex
from batch_uploader.services.outcome_aggregator import OutcomeAggregator
from batch_uploader.utils.file_utils import (
    METADATA_EXTENSIONS,
    find_first_file,
    get_document_name,
    list_files,
)

DEFAULT_MAX_WORKERS = 4


class BatchDispatcher:
    """Runs one batch folder: metadata lookup, concurrent uploads, reports."""

    def __init__(
        self,
        excel_service,
        uploader,
        archive_service,
        summary_service,
        logger,
        audit_service=None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        document_extensions: Iterable[str] = (".pdf",),
        shutdown_timeout: Optional[float] = None,
    ):
        self.excel_service = excel_service
        self.uploader = uploader
        self.archive_service = archive_service
        self.summary_service = summary_service
        self.audit_service = audit_service
        self.logger = logger
        self.max_workers = max_workers
        self.document_extensions = list(document_extensions)
        self.shutdown_timeout = shutdown_timeout

    def run(self, folder_path) -> BatchResult:
        """
        Process every document of a batch folder to a terminal outcome.

        Raises:
            InvalidBatchFolderError: folder is missing or not a directory
            MetadataSourceError: metadata spreadsheet is unreadable
        """
        start_time = datetime.now()
        folder = Path(folder_path)

        if not folder.exists() or not folder.is_dir():
            error_msg = f"Provided folder is invalid: {folder}"
            self.logger.error(error_msg)
            raise InvalidBatchFolderError(error_msg)

        result = BatchResult(batch_name=folder.name)
        self.logger.info(f"=== Processing batch folder: {folder.name} ===")

        # Locate Excel metadata file
        metadata_file = find_first_file(folder, METADATA_EXTENSIONS)
        if metadata_file is None:
            self.logger.info(f"No Excel files found in folder: {folder}")
            result.no_op = True
            self.summary_service.write_summary(result.batch_name, BatchCounters())
            return self._finish(result, start_time)

        result.metadata_file = metadata_file
        index = MetadataIndex.from_metadata(
            self.excel_service.read_metadata(metadata_file)
        )
        self.logger.info(
            f"Metadata loaded from Excel: {metadata_file.name} ({len(index)} records)"
        )

        documents = list_files(folder / DOCUMENTS_FOLDER, self.document_extensions)
        if not documents:
            self.logger.info("No documents found to process.")
            result.no_op = True
            self.summary_service.write_summary(result.batch_name, BatchCounters())
            return self._finish(result, start_time)

        tasks = self._build_tasks(documents, index, folder, result)
        aggregator = OutcomeAggregator(
            self.archive_service, self.logger, audit_service=self.audit_service
        )
        self._dispatch(tasks, aggregator)

        counters = aggregator.counters
        result.succeeded = counters.succeeded
        result.failed = counters.failed

        self._write_reports(result, aggregator)
        self.summary_service.write_summary(result.batch_name, counters)

        return self._finish(result, start_time)

    def _build_tasks(
        self,
        documents: List[Path],
        index: MetadataIndex,
        folder: Path,
        result: BatchResult,
    ) -> List[UploadTask]:
        """Pair documents with their metadata; documents without a row are skipped."""
        tasks = []
        for document in documents:
            document_name = get_document_name(document)
            record = index.lookup(document_name)
            if record is None:
                self.logger.warning(f"No metadata found for document: {document_name}")
                result.skipped.append(document_name)
                continue
            tasks.append(UploadTask(file_path=document, record=record, batch_folder=folder))

        self.logger.info(
            f"Found {len(documents)} documents: {len(tasks)} to upload, "
            f"{len(result.skipped)} without metadata"
        )
        return tasks

    def _process_task(self, task: UploadTask, aggregator: OutcomeAggregator) -> UploadOutcome:
        """Worker body: upload with retries, then record the outcome."""
        try:
            outcome = self.uploader.upload(task)
        except Exception as e:
            self.logger.exception(
                f"Unexpected error uploading document: {task.file_path.name}"
            )
            outcome = UploadOutcome(
                status=OutcomeStatus.FAILED_AFTER_RETRIES,
                task=task,
                attempts=0,
                last_attempt=UploadAttempt(success=False, error=str(e)),
            )
        aggregator.record(outcome)
        return outcome

    def _dispatch(self, tasks: List[UploadTask], aggregator: OutcomeAggregator) -> None:
        """Submit all tasks and wait until each reaches a terminal outcome."""
        if not tasks:
            return

        executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="upload-worker"
        )
        futures = {}
        try:
            for task in tasks:
                future = executor.submit(self._process_task, task, aggregator)
                futures[future] = task
            self._await_completion(futures, aggregator)
        finally:
            aggregator.close()
            executor.shutdown(wait=self.shutdown_timeout is None, cancel_futures=True)
            # Sessions belong to this pool's worker threads
            self.uploader.close()

    @staticmethod
    def _record_abandoned(
        task: UploadTask, aggregator: OutcomeAggregator, reason: str
    ) -> None:
        aggregator.record(
            UploadOutcome(
                status=OutcomeStatus.FAILED_AFTER_RETRIES,
                task=task,
                attempts=0,
                last_attempt=UploadAttempt(success=False, error=reason),
            )
        )

    def _await_completion(self, futures: Dict, aggregator: OutcomeAggregator) -> None:
        """
        Barrier over all submitted tasks.

        With a shutdown timeout the drain is two-staged: wait, then cancel the
        tasks that have not started (recorded as failures) and wait again for
        the running ones. Uploads still running after that are recorded as
        failures too; their workers' late outcomes are refused by the closed
        aggregator.
        """
        done, not_done = wait(futures, timeout=self.shutdown_timeout)

        if not_done:
            self.logger.warning(
                f"{len(not_done)} uploads still pending after {self.shutdown_timeout}s - "
                f"cancelling queued uploads"
            )
            running = []
            for future in not_done:
                if future.cancel():
                    self._record_abandoned(
                        futures[future], aggregator, "cancelled before start"
                    )
                else:
                    running.append(future)

            drained, still_running = wait(running, timeout=self.shutdown_timeout)
            done = done | drained
            if still_running:
                names = ", ".join(futures[f].file_path.name for f in still_running)
                self.logger.error(
                    f"Executor did not terminate properly: still uploading {names}"
                )
                for future in still_running:
                    self._record_abandoned(
                        futures[future], aggregator, "did not terminate"
                    )

        for future in done:
            if not future.cancelled() and future.exception() is not None:
                self.logger.error(
                    f"Error processing document: {futures[future].file_path.name}: "
                    f"{future.exception()}"
                )

    def _write_reports(self, result: BatchResult, aggregator: OutcomeAggregator) -> None:
        """Excel reports of uploaded and failed documents."""
        result.processed_report = self.excel_service.generate_report(
            [outcome.record for outcome in aggregator.succeeded],
            self.archive_service.get_report_path(result.batch_name, success=True),
        )
        result.failed_report = self.excel_service.generate_report(
            [outcome.record for outcome in aggregator.failed],
            self.archive_service.get_report_path(result.batch_name, success=False),
        )
        self.logger.info(
            f"Reports generated: Processed -> {result.processed_report}, "
            f"Failed -> {result.failed_report}"
        )

    def _finish(self, result: BatchResult, start_time: datetime) -> BatchResult:
        result.processing_time = (datetime.now() - start_time).total_seconds()
        self.logger.info(
            f"Batch {result.batch_name} finished in {result.processing_time:.1f}s"
        )
        return result

"""
Main application orchestrator that coordinates all services.
"""

from pathlib import Path
from typing import List, Optional, Sequence

from batch_uploader.config_manager import (
    ConfigManager,
    ConfigurationError,
    get_config,
    set_config_logger,
)
from batch_uploader.database_service import DatabaseService
from batch_uploader.errors import BatchUploaderError
from batch_uploader.excel_service import ExcelService
from batch_uploader.models.upload_result import BatchResult
from batch_uploader.services.archive_service import ArchiveService
from batch_uploader.services.batch_dispatcher import BatchDispatcher
from batch_uploader.services.folder_scan_service import FolderScanService
from batch_uploader.services.logging_service import LoggingService
from batch_uploader.services.retrying_uploader import RetryingUploader
from batch_uploader.services.summary_service import SummaryService
from batch_uploader.services.upload_client import UploadClient
from batch_uploader.utils.crypto_utils import PasswordDecryptionError, decrypt_password


class AppOrchestrator:
    """Main orchestrator that coordinates all services."""

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        logger: Optional[LoggingService] = None,
    ):
        self.config = config or get_config()
        self.logger = logger or LoggingService(
            "BatchUploader", logs_dir=self.config.paths.get_absolute_paths()["logs_dir"]
        )
        set_config_logger(self.logger)

        self.upload_client = None
        self.database_service = None
        self.folder_scan_service = None
        self.dispatcher = None

        # Initialize services
        self._initialize_services()

    def _initialize_services(self) -> None:
        """Initialize all required services."""
        try:
            self.logger.log_startup_info()
            self.logger.log_environment_info()

            paths = self.config.paths.get_absolute_paths()
            processing = self.config.processing

            self._initialize_upload_client()
            self._initialize_database_service()

            retrying_uploader = RetryingUploader(
                self.upload_client,
                self.logger,
                max_attempts=processing.max_attempts,
                base_delay=processing.retry_base_delay,
                max_delay=processing.retry_max_delay,
            )
            self.folder_scan_service = FolderScanService(
                paths["to_be_processed"],
                self.logger,
                folder_pattern=processing.batch_folder_pattern,
            )
            self.dispatcher = BatchDispatcher(
                excel_service=ExcelService(self.logger),
                uploader=retrying_uploader,
                archive_service=ArchiveService(
                    paths["processed"], paths["failed"], self.logger
                ),
                summary_service=SummaryService(paths["in_progress"], self.logger),
                logger=self.logger,
                audit_service=self.database_service,
                max_workers=processing.max_workers,
                document_extensions=processing.document_extensions,
                shutdown_timeout=processing.shutdown_timeout,
            )

            self.logger.info(
                f"All services initialized successfully (workers: {processing.max_workers}, "
                f"attempts per document: {processing.max_attempts})"
            )

        except Exception as e:
            self.logger.error(f"Error initializing services: {str(e)}")
            raise

    def _decrypt(self, password: str, encrypted: bool) -> str:
        if not encrypted:
            return password
        try:
            return decrypt_password(password, self.config.secret_key)
        except PasswordDecryptionError as e:
            raise ConfigurationError(f"Cannot decrypt password: {e}")

    def _initialize_upload_client(self) -> None:
        """Initialize the repository upload client."""
        repository = self.config.repository
        self.logger.info(f"Repository URL: {repository.url}")
        self.upload_client = UploadClient(
            url=repository.url,
            username=repository.username,
            password=self._decrypt(repository.password, repository.password_encrypted),
            logger=self.logger,
            timeout=repository.timeout,
        )

    def _initialize_database_service(self) -> None:
        """Initialize the audit database service."""
        if not self.config.processing.enable_audit:
            self.logger.info("Audit logging disabled in configuration")
            return

        try:
            db_config = self.config.database
            connection_config = db_config.to_dict()
            connection_config["password"] = self._decrypt(
                db_config.password, db_config.password_encrypted
            )
            self.database_service = DatabaseService(connection_config, self.logger)
            if self.database_service.test_connection():
                self.logger.info("Database service initialized and connected")
            else:
                self.logger.warning("Database connection failed - continuing without audit")
                self.database_service = None
        except ConfigurationError as e:
            self.logger.error(f"Error initializing database service: {str(e)}")
            self.database_service = None

    def process_folder(self, folder: Path) -> Optional[BatchResult]:
        """Run one batch folder; errors are logged and reported as None."""
        try:
            result = self.dispatcher.run(folder)
            self.logger.log_batch_result(result)
            return result
        except BatchUploaderError as e:
            self.logger.error(f"Error processing folder: {folder}. Error: {str(e)}")
            return None
        except Exception as e:
            self.logger.exception(f"Unexpected error processing folder {folder}: {str(e)}")
            return None

    def run(self, argv: Optional[Sequence[str]] = None) -> int:
        """Process every batch folder; exit code 1 if any folder could not run."""
        try:
            folders = self.folder_scan_service.get_batch_folders(argv)
            if not folders:
                self.logger.info("No batch folders to process")
                return 0

            results: List[Optional[BatchResult]] = [
                self.process_folder(folder) for folder in folders
            ]

            failed_folders = sum(1 for r in results if r is None)
            uploaded = sum(r.succeeded for r in results if r is not None)
            failed = sum(r.failed for r in results if r is not None)
            self.logger.info(
                f"=== RUN COMPLETE: {len(folders)} folders, {uploaded} uploaded, "
                f"{failed} failed, {failed_folders} folders with errors ==="
            )
            return 1 if failed_folders else 0

        finally:
            self._cleanup()

    def _cleanup(self) -> None:
        """Clean up resources."""
        try:
            if self.upload_client:
                self.upload_client.close()
            if self.database_service:
                self.database_service.close()
        except Exception as e:
            self.logger.error(f"Error during cleanup: {str(e)}")
        finally:
            self.logger.flush()
            self.logger.close()

"""
Logging service for centralized log management.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from batch_uploader.utils.environment_utils import (
    get_environment_info,
    get_run_id,
    log_environment_variables,
)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(threadName)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LoggingService:
    """Centralized logging service for the application."""

    def __init__(
        self,
        service_name: str = "BatchUploader",
        logs_dir: Optional[str] = None,
        run_label: Optional[str] = None,
    ):
        self.service_name = service_name
        self.logs_dir = logs_dir
        self.log_file: Optional[Path] = None
        self.logger = self._setup_logger()

        # Create file logger immediately if a logs directory is provided
        if self.logs_dir:
            self.create_file_logger(run_label or service_name)

    def _setup_logger(self) -> logging.Logger:
        """Setup logging with immediate console output."""
        logger = logging.getLogger(self.service_name)
        logger.setLevel(logging.INFO)
        logger.propagate = False

        if not logger.handlers:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(logging.INFO)

            # Formatter for console with run ID
            console_formatter = logging.Formatter(
                f"%(asctime)s - RUN:{get_run_id()} - %(levelname)s - %(message)s",
                datefmt=DATE_FORMAT,
            )
            console_handler.setFormatter(console_formatter)
            logger.addHandler(console_handler)

        return logger

    def create_file_logger(self, run_label: str) -> None:
        """Add a file handler writing to <logs_dir>/<YYYYMMDD>/<label>_<ts>.log."""
        try:
            today = datetime.now().strftime("%Y%m%d")
            log_dir = Path(self.logs_dir) / today
            log_dir.mkdir(parents=True, exist_ok=True)

            # Clean the label for use in the log filename
            base_label = os.path.basename(run_label)
            clean_label = "".join(
                c for c in base_label if c.isalnum() or c in (" ", "-", "_")
            ).rstrip()
            clean_label = clean_label.replace(" ", "_") or self.service_name
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file = log_dir / f"{clean_label}_{timestamp}.log"

            file_handler = logging.FileHandler(
                filename=str(log_file), mode="a", encoding="utf-8"
            )
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

            self.logger.addHandler(file_handler)
            self.log_file = log_file
            self.logger.info(f"Log file will be saved to: {log_file}")

        except Exception as e:
            self.logger.error(f"Could not create file logger: {str(e)}")

    def log_startup_info(self) -> None:
        """Log startup information."""
        info = get_environment_info()
        self.logger.info("=== BATCH UPLOADER STARTING ===")
        self.logger.info(f"ENVIRONMENT: {info['environment'].upper()}")
        self.logger.info(f"RUN_ID: {info['run_id']}")
        self.logger.info(f"HOST: {info['hostname']} (user: {info['os_user']})")
        sys.stdout.flush()

    def info(self, message: str) -> None:
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str) -> None:
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str) -> None:
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str) -> None:
        """Log debug message."""
        self.logger.debug(message)

    def exception(self, message: str) -> None:
        """Log error message with the active traceback."""
        self.logger.exception(message)

    def log_batch_result(self, result) -> None:
        """Log the end-of-batch summary."""
        if result.no_op:
            self.info(f"Batch {result.batch_name}: nothing to process")
            return

        self.info(
            f"Batch {result.batch_name}: {result.succeeded} uploaded, "
            f"{result.failed} failed, {len(result.skipped)} skipped"
        )
        if result.failed:
            self.error(f"=== BATCH {result.batch_name} END - WITH FAILURES ===")
        else:
            self.info(f"=== BATCH {result.batch_name} END - SUCCESS ===")

    def log_environment_info(self) -> None:
        """Log environment information."""
        log_environment_variables(self.logger)

    def flush(self) -> None:
        """Force flush all log handlers."""
        sys.stdout.flush()
        sys.stderr.flush()
        for handler in self.logger.handlers:
            handler.flush()

    def close(self) -> None:
        """Flush and detach the file handler of this run."""
        for handler in list(self.logger.handlers):
            if isinstance(handler, logging.FileHandler):
                handler.close()
                self.logger.removeHandler(handler)

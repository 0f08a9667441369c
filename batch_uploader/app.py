#!/usr/bin/env python3
"""
Batch Document Uploader

Uploads the documents of dated batch folders to the document repository.

Usage:
    batch-uploader                      # Process every DD-MM-YYYY folder in TO_BE_PROCESSED_DIR
    batch-uploader path/to/17-10-2024   # Process the given folder(s) only
"""

import sys
from datetime import datetime

from batch_uploader.config_manager import ConfigurationError
from batch_uploader.services.app_orchestrator import AppOrchestrator
from batch_uploader.utils.environment_utils import get_environment, get_run_id


def main(argv=None):
    """
    Main entry point - Application orchestration.

    All business logic is delegated to specialized services.
    """
    if argv is None:
        argv = sys.argv[1:]

    try:
        print("=== BATCH UPLOADER STARTING ===")
        print(f"Environment: {get_environment().upper()}")
        print(f"Run ID: {get_run_id()}")
        print(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

        orchestrator = AppOrchestrator()
        return orchestrator.run(argv)

    except KeyboardInterrupt:
        print("\nUploader stopped by user")
        print("=== PROCESSING END - INTERRUPTED ===")
        return 130

    except ConfigurationError as e:
        print(f"Configuration error: {str(e)}")
        print("=== PROCESSING END - ERROR ===")
        return 2

    except Exception as e:
        print(f"Uploader failed: {str(e)}")
        print("=== PROCESSING END - ERROR ===")
        return 1


if __name__ == "__main__":
    sys.exit(main())

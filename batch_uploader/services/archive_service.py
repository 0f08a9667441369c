"""
Archive service for relocating documents after their upload outcome.
"""

from pathlib import Path
from typing import Optional

from batch_uploader.utils.file_utils import delete_if_exists, move_replacing

DOCUMENTS_FOLDER = "Documents"
REPORT_FILENAME = "Data.xlsx"


class ArchiveService:
    """Service for processed/failed folder layout and file relocation."""

    def __init__(self, processed_root: Path, failed_root: Path, logger):
        self.processed_root = Path(processed_root)
        self.failed_root = Path(failed_root)
        self.logger = logger

    def get_failed_documents_dir(self, batch_name: str) -> Path:
        """Failure mirror of a batch's Documents folder."""
        return self.failed_root / batch_name / DOCUMENTS_FOLDER

    def get_report_path(self, batch_name: str, success: bool = True) -> Path:
        """Location of the processed or failed Excel report of a batch."""
        root = self.processed_root if success else self.failed_root
        return root / batch_name / REPORT_FILENAME

    def remove_processed_document(self, file_path: Path) -> bool:
        """Delete an uploaded document from the pending folder.

        A document that is already gone is not an error.
        """
        try:
            if delete_if_exists(file_path):
                self.logger.info(f"Removed uploaded document: {file_path}")
            else:
                self.logger.info(f"Uploaded document already removed: {file_path}")
            return True
        except OSError as e:
            self.logger.error(f"Error removing uploaded document {file_path}: {str(e)}")
            return False

    def archive_failed_document(
        self, file_path: Path, batch_name: str
    ) -> Optional[Path]:
        """Move a failed document to <failed_root>/<batch>/Documents/.

        Creates the folder if needed and overwrites a same-named file.
        Returns the new path, or None when the move failed.
        """
        target_dir = self.get_failed_documents_dir(batch_name)
        try:
            archive_path = move_replacing(file_path, target_dir)
            self.logger.warning(
                f"Archived failed document '{file_path}' to '{archive_path}'"
            )
            return archive_path
        except OSError as e:
            self.logger.error(f"Error archiving failed document {file_path}: {str(e)}")
            return None

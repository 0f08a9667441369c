"""
Folder scan service for finding batch folders to process.
"""

import re
from pathlib import Path
from typing import List, Optional, Sequence

from batch_uploader.config_manager import DEFAULT_BATCH_FOLDER_PATTERN


class FolderScanService:
    """Service for resolving which batch folders a run processes."""

    def __init__(
        self,
        to_be_processed_dir: Path,
        logger,
        folder_pattern: str = DEFAULT_BATCH_FOLDER_PATTERN,
    ):
        self.to_be_processed_dir = Path(to_be_processed_dir)
        self.logger = logger
        self.folder_pattern = re.compile(folder_pattern)

    def is_valid_batch_folder(self, folder: Path) -> bool:
        """Check the folder name against the batch pattern (DD-MM-YYYY)."""
        return bool(self.folder_pattern.fullmatch(Path(folder).name))

    def get_folders_from_args(self, argv: Optional[Sequence[str]]) -> List[Path]:
        """Folders named explicitly on the command line."""
        if not argv:
            return []
        folders = [Path(arg) for arg in argv]
        for folder in folders:
            self.logger.info(f"Batch folder from command line: {folder}")
        return folders

    def scan_batch_folders(self) -> List[Path]:
        """Date-named sub-folders of the to-be-processed folder, oldest name first."""
        if not self.to_be_processed_dir.is_dir():
            self.logger.error(f"Invalid folder path: {self.to_be_processed_dir}")
            return []

        folders = []
        for folder in sorted(p for p in self.to_be_processed_dir.iterdir() if p.is_dir()):
            if not self.is_valid_batch_folder(folder):
                self.logger.warning(f"Skipping invalid folder: {folder.name}")
                continue
            self.logger.info(f"Existing folder detected: {folder.name}")
            folders.append(folder)

        return folders

    def get_batch_folders(self, argv: Optional[Sequence[str]] = None) -> List[Path]:
        """Folders from the command line if given, otherwise the scanned ones."""
        folders = self.get_folders_from_args(argv)
        if folders:
            return folders
        return self.scan_batch_folders()

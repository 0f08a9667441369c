"""
JSON summary of uploaded and failed document counts per batch.
"""

import json
import threading
from pathlib import Path
from typing import Dict, List

from batch_uploader.models.upload_result import BatchCounters

SUMMARY_FILENAME = "upload_summary.json"


class SummaryService:
    """Appends one JSON object per batch to a shared summary file."""

    _write_lock = threading.Lock()

    def __init__(self, in_progress_dir: Path, logger):
        self.summary_path = Path(in_progress_dir) / SUMMARY_FILENAME
        self.logger = logger

    @staticmethod
    def build_summary(batch_name: str, counters: BatchCounters) -> Dict[str, Dict[str, str]]:
        """Summary entry keyed by batch folder name, counts as strings."""
        return {
            batch_name: {
                "uploaded_documents": str(counters.succeeded),
                "failed_documents": str(counters.failed),
            }
        }

    def write_summary(self, batch_name: str, counters: BatchCounters) -> bool:
        """Append the batch summary; repeated runs accumulate entries."""
        try:
            entry = json.dumps(self.build_summary(batch_name, counters))
            with self._write_lock:
                self.summary_path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.summary_path, "a", encoding="utf-8") as f:
                    f.write(entry + "\n")

            self.logger.info(f"Generated JSON summary and saved to: {self.summary_path}")
            return True

        except OSError as e:
            self.logger.error(f"Error writing JSON summary {self.summary_path}: {str(e)}")
            return False

    def read_summaries(self) -> List[Dict[str, Dict[str, str]]]:
        """All summary entries in the order they were written."""
        if not self.summary_path.exists():
            return []

        entries = []
        with open(self.summary_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError as e:
                    self.logger.warning(f"Skipping malformed summary line: {str(e)}")
        return entries

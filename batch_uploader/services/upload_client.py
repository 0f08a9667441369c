"""
Document repository client performing single upload attempts over HTTP.
"""

import json
import os
import threading
from pathlib import Path

import requests
from requests.auth import HTTPBasicAuth

from batch_uploader.models.metadata_record import MetadataRecord
from batch_uploader.models.upload_result import UploadAttempt
from batch_uploader.utils.file_utils import format_file_size, guess_content_type

SUCCESS_STATUS_CODES = (200, 201)


class UploadClient:
    """Service for uploading one document and its metadata to the repository.

    Performs exactly one request per call; retrying is the caller's concern.
    Each worker thread gets its own requests.Session so pooled connections
    are reused without being shared across threads.
    """

    def __init__(
        self, url: str, username: str, password: str, logger, timeout: float = 60.0
    ):
        self.url = url
        self.auth = HTTPBasicAuth(username, password)
        self.logger = logger
        self.timeout = timeout
        self._local = threading.local()
        self._sessions = []
        self._sessions_lock = threading.Lock()
        # Bumped by close(); threads holding an older session open a new one
        self._generation = 0

    def _get_session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None or self._local.generation != self._generation:
            session = requests.Session()
            session.auth = self.auth
            session.headers.update({"Accept": "application/json"})
            with self._sessions_lock:
                self._sessions.append(session)
                self._local.generation = self._generation
            self._local.session = session
        return session

    @staticmethod
    def build_metadata_json(record: MetadataRecord) -> str:
        """JSON body of the metadata part."""
        return json.dumps({"properties": record.to_properties()})

    def upload(self, file_path: Path, record: MetadataRecord) -> UploadAttempt:
        """Upload file_path with record; never raises for HTTP or I/O errors."""
        file_path = Path(file_path)
        try:
            with open(file_path, "rb") as content:
                files = {
                    "metadata": (
                        None,
                        self.build_metadata_json(record),
                        "application/json",
                    ),
                    "content": (file_path.name, content, guess_content_type(file_path)),
                }
                response = self._get_session().post(
                    self.url, files=files, timeout=self.timeout
                )
        except requests.RequestException as e:
            self.logger.error(f"Error uploading document {file_path.name}: {str(e)}")
            return UploadAttempt(success=False, error=f"{type(e).__name__}: {e}")
        except OSError as e:
            self.logger.error(f"Error reading document {file_path.name}: {str(e)}")
            return UploadAttempt(success=False, error=f"{type(e).__name__}: {e}")

        if response.status_code in SUCCESS_STATUS_CODES:
            size = os.path.getsize(file_path) if file_path.exists() else 0
            self.logger.info(
                f"Uploaded {file_path.name} ({format_file_size(size)}) - HTTP {response.status_code}"
            )
            return UploadAttempt(success=True, status_code=response.status_code)

        detail = (response.text or "").strip()[:500]
        self.logger.warning(
            f"Repository rejected {file_path.name}: HTTP {response.status_code} {detail}"
        )
        return UploadAttempt(
            success=False, status_code=response.status_code, error=detail or None
        )

    def close(self) -> None:
        """Close every per-thread session opened so far.

        Called after each batch's worker pool shuts down,
        and once more at the end of the run.
        """
        with self._sessions_lock:
            for session in self._sessions:
                session.close()
            self._sessions.clear()
            self._generation += 1

"""Shared fixtures for batch uploader tests.

No network or database access: the repository client is replaced by
FakeUploadClient and spreadsheets are written with pandas into tmp_path.
"""

import logging
import threading
from collections import Counter
from pathlib import Path

import pandas as pd
import pytest

from batch_uploader.config_manager import ConfigManager
from batch_uploader.models.upload_result import UploadAttempt

METADATA_HEADER = [
    "object_name",
    "doc_type",
    "cch_contract_no",
    "cch_customer_name",
    "cch_customer_account",
    "cch_mobile_no",
    "cch_sim_no",
    "cch_comments",
]


class FakeUploadClient:
    """Thread-safe stand-in for UploadClient.

    Documents whose base name is in fail_names always fail; every call is
    counted per file name.
    """

    def __init__(self, fail_names=(), status_code=201):
        self.fail_names = set(fail_names)
        self.status_code = status_code
        self.calls = Counter()
        self.closed = 0
        self._lock = threading.Lock()

    def upload(self, file_path, record):
        with self._lock:
            self.calls[Path(file_path).name] += 1
        if record.document_name in self.fail_names:
            return UploadAttempt(success=False, status_code=500, error="boom")
        return UploadAttempt(success=True, status_code=self.status_code)

    def close(self):
        self.closed += 1

    @property
    def total_calls(self):
        return sum(self.calls.values())


def write_metadata(path, rows, header=None):
    """Write a metadata workbook: header row then one row per document."""
    header = header or METADATA_HEADER
    df = pd.DataFrame(rows, columns=header)
    df.to_excel(path, index=False, engine="openpyxl")
    return path


CONFIG_VARS = [
    "THREAD_POOL_SIZE",
    "MAX_UPLOAD_ATTEMPTS",
    "RETRY_BASE_DELAY",
    "RETRY_MAX_DELAY",
    "SHUTDOWN_TIMEOUT",
    "DOCUMENT_EXTENSIONS",
    "ENABLE_AUDIT",
    "BATCH_FOLDER_PATTERN",
    "REPOSITORY_URL",
    "REPOSITORY_USERNAME",
    "REPOSITORY_PASSWORD",
    "REPOSITORY_PASSWORD_ENCRYPTED",
    "REPOSITORY_TIMEOUT",
    "DB_HOST",
    "DB_PORT",
    "DB_NAME",
    "DB_USER",
    "DB_PASSWORD",
    "DB_SSLMODE",
    "DB_PASSWORD_ENCRYPTED",
    "SECRET_KEY",
    "TO_BE_PROCESSED_DIR",
    "IN_PROGRESS_DIR",
    "PROCESSED_DIR",
    "FAILED_DIR",
    "LOGS_DIR",
]


def make_config(tmp_path):
    """ConfigManager reading only the process environment."""
    return ConfigManager(env_file=str(tmp_path / "missing.env"))


def metadata_row(name, doc_type="Contract", mobile="01000000000"):
    return [name, doc_type, "12345.0", f"Customer {name}", "1.34086595", mobile, "", ""]


def make_batch(root, batch_name, documents, metadata_names=None, extension=".pdf"):
    """Create <root>/<batch>/Metadata.xlsx and <root>/<batch>/Documents/<doc>.pdf."""
    folder = Path(root) / batch_name
    documents_dir = folder / "Documents"
    documents_dir.mkdir(parents=True)

    for name in documents:
        (documents_dir / f"{name}{extension}").write_bytes(b"%PDF-1.4 " + name.encode())

    names = documents if metadata_names is None else metadata_names
    write_metadata(folder / "Metadata.xlsx", [metadata_row(n) for n in names])
    return folder


@pytest.fixture
def logger():
    return logging.getLogger("tests.batch_uploader")


@pytest.fixture
def dirs(tmp_path):
    """to_be_processed / processed / failed / in_progress roots."""
    paths = {
        name: tmp_path / name
        for name in ("to_be_processed", "processed", "failed", "in_progress")
    }
    for path in paths.values():
        path.mkdir()
    return paths


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Minimal valid environment with audit disabled and absolute folders."""
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)
    values = {
        "REPOSITORY_URL": "http://repo/documents",
        "REPOSITORY_USERNAME": "uploader",
        "REPOSITORY_PASSWORD": "plain",
        "REPOSITORY_PASSWORD_ENCRYPTED": "false",
        "ENABLE_AUDIT": "false",
        "TO_BE_PROCESSED_DIR": str(tmp_path / "to_be_processed"),
        "IN_PROGRESS_DIR": str(tmp_path / "in_progress"),
        "PROCESSED_DIR": str(tmp_path / "processed"),
        "FAILED_DIR": str(tmp_path / "failed"),
        "LOGS_DIR": str(tmp_path / "logs"),
    }
    for name, value in values.items():
        monkeypatch.setenv(name, value)
    return monkeypatch

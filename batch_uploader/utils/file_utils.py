"""
File utility functions for common file operations.
"""

import errno
import mimetypes
import os
import shutil
from pathlib import Path
from typing import Iterable, List, Optional

DEFAULT_CONTENT_TYPE = "application/octet-stream"
METADATA_EXTENSIONS = [".xlsx"]


def has_extension(filename: str, extensions: Iterable[str]) -> bool:
    """Check if filename ends with one of the given extensions."""
    return any(filename.lower().endswith(ext.lower()) for ext in extensions)


def get_document_name(file_path: Path) -> str:
    """Document identifier: the file name without its extension."""
    return Path(file_path).stem


def guess_content_type(file_path: Path) -> str:
    """Best-effort content type guess for an upload."""
    content_type, _ = mimetypes.guess_type(str(file_path))
    return content_type or DEFAULT_CONTENT_TYPE


def format_file_size(size_bytes: int) -> str:
    """Format file size in human readable format."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} TB"


def find_first_file(folder: Path, extensions: Iterable[str]) -> Optional[Path]:
    """Return the first file (by name) in folder with a matching extension."""
    matches = list_files(folder, extensions)
    return matches[0] if matches else None


def list_files(folder: Path, extensions: Iterable[str]) -> List[Path]:
    """List regular files in folder with a matching extension, sorted by name."""
    folder = Path(folder)
    if not folder.is_dir():
        return []
    extensions = list(extensions)
    return sorted(
        path
        for path in folder.iterdir()
        if path.is_file()
        and has_extension(path.name, extensions)
        and not path.name.startswith("~$")
    )


def delete_if_exists(file_path: Path) -> bool:
    """Delete a file; a missing file is not an error. Returns True if deleted."""
    try:
        os.remove(file_path)
        return True
    except FileNotFoundError:
        return False


def move_replacing(file_path: Path, target_dir: Path) -> Path:
    """Move file into target_dir, creating it and overwriting a same-named file.

    An existing target is only replaced once the source is known to exist.
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"No such file: {file_path}")

    target_dir = Path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    target_path = target_dir / file_path.name

    try:
        # Atomic overwrite on the same filesystem
        os.replace(file_path, target_path)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        shutil.move(str(file_path), str(target_path))
    return target_path

"""
Exception types raised by the batch upload pipeline.
"""


class BatchUploaderError(Exception):
    """Base class for pipeline errors."""

    pass


class InvalidBatchFolderError(BatchUploaderError):
    """Batch folder is missing or is not a directory."""

    pass


class MetadataSourceError(BatchUploaderError):
    """Metadata spreadsheet could not be read or is malformed."""

    pass

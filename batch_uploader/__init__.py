"""
Batch Document Uploader

Uploads dated batches of documents with spreadsheet metadata to a
document repository and reports what succeeded and what failed.
"""

__version__ = "1.0.0"

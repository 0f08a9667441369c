"""Data models for metadata records and upload results."""

"""
Read-only lookup from document identifier to metadata record.
"""

from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Tuple

from batch_uploader.models.metadata_record import MetadataRecord


class MetadataIndex:
    """Immutable document-name -> MetadataRecord mapping for one batch.

    Built once per batch and only read afterwards, so worker threads share it
    without locking.
    """

    def __init__(self, records: Mapping[str, MetadataRecord]):
        self._records = MappingProxyType(dict(records))

    @classmethod
    def build(
        cls, rows: Iterable[Tuple[str, Mapping[str, str]]]
    ) -> "MetadataIndex":
        """Build the index from (identifier, field-map) pairs."""
        records = {}
        for identifier, field_map in rows:
            record = MetadataRecord.from_fields(identifier, field_map)
            records[record.document_name] = record
        return cls(records)

    @classmethod
    def from_metadata(cls, metadata: Mapping[str, Mapping[str, str]]) -> "MetadataIndex":
        """Build the index from the spreadsheet reader's mapping."""
        return cls.build(metadata.items())

    def lookup(self, identifier: str) -> Optional[MetadataRecord]:
        """Record for identifier, or None when the spreadsheet has no row for it."""
        return self._records.get(identifier)

    def identifiers(self) -> Iterator[str]:
        return iter(self._records)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._records

    def __len__(self) -> int:
        return len(self._records)

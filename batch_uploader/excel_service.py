"""
Excel Service
Reads per-document metadata from the batch spreadsheet and writes upload reports
"""

import math
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import pandas as pd

from batch_uploader.errors import MetadataSourceError
from batch_uploader.models.metadata_record import MetadataRecord

REPORT_SHEET_NAME = "Document Upload Report"


def cell_to_string(value: Any) -> str:
    """Render a spreadsheet cell as text without losing decimal precision."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    if value is pd.NaT:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        # repr gives the shortest round-trip text; Decimal avoids exponent form
        return format(Decimal(repr(value)), "f")
    if isinstance(value, (datetime, date)):
        return value.isoformat(sep=" ") if isinstance(value, datetime) else value.isoformat()
    return str(value)


class ExcelService:
    """Service for metadata spreadsheet input and report output."""

    def __init__(self, logger):
        self.logger = logger

    def read_metadata(self, excel_path: Path) -> Dict[str, Dict[str, str]]:
        """
        Read the first sheet of the metadata workbook.

        Row 0 holds the field names. Column 0 of every following row holds the
        document identifier; the remaining cells become that document's fields.

        Returns:
            Dict mapping document identifier to a field-name -> value mapping

        Raises:
            MetadataSourceError: if the workbook cannot be read or has no header
        """
        try:
            df = pd.read_excel(
                excel_path, sheet_name=0, header=None, dtype=object, engine="openpyxl"
            )
        except Exception as e:
            raise MetadataSourceError(
                f"Cannot read metadata spreadsheet {excel_path}: {str(e)}"
            )

        if df.empty:
            raise MetadataSourceError(f"Metadata spreadsheet is empty: {excel_path}")

        headers = [cell_to_string(value).strip() for value in df.iloc[0].tolist()]
        metadata: Dict[str, Dict[str, str]] = {}

        for row_number, row in enumerate(df.iloc[1:].itertuples(index=False), start=2):
            values = list(row)
            document_name = cell_to_string(values[0]).strip()
            if not document_name:
                if any(cell_to_string(v).strip() for v in values[1:]):
                    self.logger.warning(
                        f"Row {row_number} in {Path(excel_path).name} has no document name - skipped"
                    )
                continue

            fields = {}
            for col in range(1, len(headers)):
                header = headers[col]
                if not header:
                    continue
                value = values[col] if col < len(values) else None
                fields[header] = cell_to_string(value).strip()

            if document_name in metadata:
                self.logger.warning(
                    f"Duplicate metadata row for '{document_name}' (row {row_number}) - last row wins"
                )
            metadata[document_name] = fields

        self.logger.info(
            f"Read {len(metadata)} metadata rows from {Path(excel_path).name}"
        )
        return metadata

    def generate_report(
        self, records: Sequence[MetadataRecord], report_path: Path
    ) -> Optional[Path]:
        """
        Write one row per record to an Excel report.

        Nothing is written for an empty record list. Write errors are logged
        and reported as None; they never fail the batch.
        """
        if not records:
            self.logger.warning(f"No metadata to generate a report: {report_path}")
            return None

        try:
            report_path = Path(report_path)
            report_path.parent.mkdir(parents=True, exist_ok=True)

            df = pd.DataFrame([record.to_report_row() for record in records])
            df.to_excel(
                report_path, sheet_name=REPORT_SHEET_NAME, index=False, engine="openpyxl"
            )

            self.logger.info(
                f"Excel report generated successfully: {report_path} ({len(df)} rows)"
            )
            return report_path

        except Exception as e:
            self.logger.error(f"Error generating Excel report {report_path}: {str(e)}")
            return None

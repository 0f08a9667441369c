"""
Metadata record describing one document of a batch.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple

# Wire default for an empty customer account (decimal string, never a float)
DEFAULT_CUSTOMER_ACCOUNT = "0.00000000"

# Spreadsheet column -> record attribute
SPREADSHEET_COLUMNS = {
    "doc_type": "document_type",
    "cch_contract_no": "contract_no",
    "cch_sfid": "sfid",
    "cch_source": "source",
    "cch_customer_name": "customer_name",
    "cch_customer_id": "customer_id",
    "cch_customer_account": "customer_account",
    "cch_box_no": "box_no",
    "cch_mobile_no": "mobile_numbers",
    "cch_department_code": "department_code",
    "deleteflag": "delete_flag",
    "cch_status": "status",
    "cch_sub_department_code": "sub_department_code",
    "cch_sim_no": "sim_numbers",
    "cch_comments": "comments",
}

LIST_FIELDS = ("mobile_numbers", "sim_numbers")


def clean_contract_no(contract_no: str) -> str:
    """Remove a trailing '.0' left by numeric spreadsheet cells."""
    if contract_no.endswith(".0"):
        return contract_no[:-2]
    return contract_no


@dataclass(frozen=True)
class MetadataRecord:
    """Descriptive fields for one document, keyed by its base file name."""

    document_name: str
    document_type: str = ""
    contract_no: str = ""
    sfid: str = ""
    source: str = ""
    customer_name: str = ""
    customer_id: str = ""
    customer_account: str = ""
    box_no: str = ""
    mobile_numbers: Tuple[str, ...] = ()
    department_code: str = ""
    delete_flag: str = ""
    status: str = ""
    sub_department_code: str = ""
    sim_numbers: Tuple[str, ...] = ()
    comments: str = ""

    @classmethod
    def from_fields(
        cls, document_name: str, field_map: Mapping[str, str]
    ) -> "MetadataRecord":
        """Build a record from a spreadsheet row keyed by column header.

        Unknown columns are ignored and missing columns fall back to the
        empty defaults. Single-valued SIM and mobile cells become one-item
        tuples.
        """
        values: Dict[str, Any] = {}
        for column, attribute in SPREADSHEET_COLUMNS.items():
            raw = field_map.get(column)
            value = "" if raw is None else str(raw).strip()
            if attribute in LIST_FIELDS:
                values[attribute] = (value,) if value else ()
            else:
                values[attribute] = value

        values["contract_no"] = clean_contract_no(values["contract_no"])
        return cls(document_name=document_name.strip(), **values)

    @property
    def affected_customer(self) -> str:
        """Label written to the audit trail for this document."""
        mobile_no = self.mobile_numbers[0] if self.mobile_numbers else ""
        return f"{self.document_name} - {mobile_no}"

    def to_properties(self) -> Dict[str, Any]:
        """Repository properties for the upload request body."""
        return {
            "object_name": self.document_name,
            "r_object_type": self.document_type,
            "cch_contract_no": self.contract_no,
            "cch_sfid": self.sfid,
            "cch_source": self.source,
            "cch_customer_name": self.customer_name,
            "cch_customer_id": self.customer_id,
            "cch_box_no": self.box_no,
            "cch_department_code": self.department_code,
            "deleteflag": self.delete_flag,
            "cch_status": self.status,
            "cch_comments": self.comments,
            "cch_sub_department_code": self.sub_department_code,
            "cch_sim_no": list(self.sim_numbers),
            "cch_mobile_no": list(self.mobile_numbers),
            "cch_customer_account": self.customer_account
            or DEFAULT_CUSTOMER_ACCOUNT,
        }

    def to_report_row(self) -> Dict[str, str]:
        """Flat row for the Excel report, lists rendered as text."""
        row = {}
        for key, value in self.to_properties().items():
            row[key] = ", ".join(value) if isinstance(value, list) else value
        return row

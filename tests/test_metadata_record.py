"""Tests for MetadataRecord and MetadataIndex."""

import pytest

from batch_uploader.models.metadata_record import (
    DEFAULT_CUSTOMER_ACCOUNT,
    MetadataRecord,
    clean_contract_no,
)
from batch_uploader.services.metadata_index import MetadataIndex


class TestMetadataRecord:
    """Building records from spreadsheet rows."""

    def test_missing_fields_default_to_empty_values(self):
        record = MetadataRecord.from_fields("DOC-1", {})
        assert record.document_type == ""
        assert record.customer_account == ""
        assert record.mobile_numbers == ()
        assert record.sim_numbers == ()

    def test_fields_are_trimmed_and_mapped(self):
        record = MetadataRecord.from_fields(
            " DOC-1 ",
            {
                "doc_type": " Contract ",
                "cch_customer_name": "Acme",
                "cch_customer_account": "1.34086595",
                "cch_mobile_no": "01012345678",
                "cch_sim_no": "8920",
                "unknown_column": "ignored",
            },
        )
        assert record.document_name == "DOC-1"
        assert record.document_type == "Contract"
        assert record.customer_name == "Acme"
        assert record.customer_account == "1.34086595"
        assert record.mobile_numbers == ("01012345678",)
        assert record.sim_numbers == ("8920",)

    def test_contract_number_loses_trailing_zero_decimal(self):
        record = MetadataRecord.from_fields("DOC-1", {"cch_contract_no": "778899.0"})
        assert record.contract_no == "778899"

    @pytest.mark.parametrize(
        "raw, expected", [("12.0", "12"), ("12.05", "12.05"), ("", ""), ("A.0B", "A.0B")]
    )
    def test_clean_contract_no(self, raw, expected):
        assert clean_contract_no(raw) == expected

    def test_records_are_immutable(self):
        record = MetadataRecord.from_fields("DOC-1", {})
        with pytest.raises(AttributeError):
            record.document_type = "Other"

    def test_properties_keep_lists_and_account_default(self):
        record = MetadataRecord.from_fields("DOC-1", {"doc_type": "Contract"})
        properties = record.to_properties()
        assert properties["object_name"] == "DOC-1"
        assert properties["r_object_type"] == "Contract"
        assert properties["cch_mobile_no"] == []
        assert properties["cch_sim_no"] == []
        assert properties["cch_customer_account"] == DEFAULT_CUSTOMER_ACCOUNT
        assert None not in properties.values()

    def test_report_row_renders_lists_as_text(self):
        record = MetadataRecord.from_fields("DOC-1", {"cch_mobile_no": "0100"})
        assert record.to_report_row()["cch_mobile_no"] == "0100"

    def test_affected_customer_label(self):
        record = MetadataRecord.from_fields("DOC-1", {"cch_mobile_no": "0100"})
        assert record.affected_customer == "DOC-1 - 0100"
        assert MetadataRecord("DOC-2").affected_customer == "DOC-2 - "


class TestMetadataIndex:
    """Lookup by document identifier."""

    def test_lookup_existing_and_missing(self):
        index = MetadataIndex.build([("DOC-1", {"doc_type": "Contract"})])
        assert index.lookup("DOC-1").document_type == "Contract"
        assert index.lookup("DOC-2") is None

    def test_lookup_is_case_sensitive(self):
        index = MetadataIndex.build([("Doc-1", {})])
        assert index.lookup("doc-1") is None
        assert "Doc-1" in index

    def test_from_metadata_mapping(self):
        index = MetadataIndex.from_metadata({"A": {}, "B": {"doc_type": "X"}})
        assert len(index) == 2
        assert sorted(index.identifiers()) == ["A", "B"]

    def test_index_is_read_only(self):
        index = MetadataIndex.build([("DOC-1", {})])
        with pytest.raises(TypeError):
            index._records["DOC-2"] = MetadataRecord("DOC-2")

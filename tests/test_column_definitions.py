"""Tests for column definition modules."""

import pytest

from nci60_tlbx.data.base_columns import ColumnMetadata
from nci60_tlbx.data.nci60_columns import DEFAULT_CANCER_TYPES, CancerType, NCI60Column


class TestColumnMetadata:
    """Test ColumnMetadata dataclass."""

    def test_column_metadata_is_frozen(self) -> None:
        metadata = ColumnMetadata(original_name="labs", cleaned_name="label", dtype="category", pretty_name="Type")
        with pytest.raises(AttributeError):
            metadata.original_name = "Changed"  # type: ignore[misc]


class TestNCI60Column:
    """Test NCI60Column enum."""

    def test_label_metadata(self) -> None:
        assert NCI60Column.LABEL == "label"
        assert NCI60Column.LABEL.original_name == "labs"
        assert NCI60Column.LABEL.pretty_name == "Cancer Type"
        assert NCI60Column.LABEL.dtype_name == "category"

    def test_non_descriptor_columns(self) -> None:
        assert NCI60Column.identifier_columns() == ["sample"]
        assert NCI60Column.categorical_columns() == ["label"]
        assert set(NCI60Column.non_descriptor_columns()) == {"sample", "label"}


class TestCancerType:
    """Test cancer type definitions."""

    def test_default_types_and_order(self) -> None:
        assert list(DEFAULT_CANCER_TYPES) == ["BREAST", "RENAL", "MELANOMA", "NSCLC", "COLON"]

    def test_reproducibility_lines_keep_raw_spelling(self) -> None:
        assert CancerType.K562A_REPRO == "K562A-repro"
        assert CancerType("MCF7D-repro") is CancerType.MCF7D_REPRO

"""Tests for DatasetView and BaseDataset.view()."""

import pandas as pd
import pytest

from nci60_tlbx.data import DatasetView, NCICol


class TestDatasetView:
    """Test DatasetView functionality."""

    @pytest.fixture
    def sample_view(self) -> DatasetView:
        """Create a sample DatasetView for testing."""
        data = pd.DataFrame(
            {
                "g1": [1.0, 2.0, 3.0],
                "g2": [4.0, 5.0, 6.0],
                "label": pd.Categorical(["BREAST", "RENAL", "BREAST"]),
            },
        )
        return DatasetView(
            df=data,
            pretty_by_col={"g1": "G1", "g2": "G2", "label": "Cancer Type"},
            numeric_cols=["g1", "g2"],
            label_col="label",
        )

    def test_view_creation(self, sample_view: DatasetView) -> None:
        assert len(sample_view.df) == 3
        assert sample_view.label_col == "label"
        assert sample_view.scaling == "none"

    def test_view_is_frozen(self, sample_view: DatasetView) -> None:
        """Test that DatasetView is immutable."""
        with pytest.raises(AttributeError):
            sample_view.label_col = "g1"  # type: ignore[misc]

    def test_features_property(self, sample_view: DatasetView) -> None:
        assert list(sample_view.features.columns) == ["g1", "g2"]

    def test_features_without_numeric_cols_excludes_label(self, sample_view: DatasetView) -> None:
        view = DatasetView(df=sample_view.df, pretty_by_col={}, numeric_cols=[], label_col="label")
        assert list(view.features.columns) == ["g1", "g2"]

    def test_labels_property(self, sample_view: DatasetView) -> None:
        assert sample_view.labels.to_list() == ["BREAST", "RENAL", "BREAST"]

    def test_labels_none_without_label_col(self, sample_view: DatasetView) -> None:
        view = DatasetView(df=sample_view.df[["g1"]], pretty_by_col={}, numeric_cols=["g1"])
        assert view.labels is None
        assert not view.is_standardized


class TestDatasetViewFactory:
    """Test views built from a dataset."""

    def test_default_view_has_label(self, nci60_dataset) -> None:
        view = nci60_dataset.view()
        assert view.label_col == NCICol.LABEL
        assert view.df.columns[-1] == NCICol.LABEL
        assert len(view.numeric_cols) == len(nci60_dataset.numeric_cols)

    def test_standardized_view(self, nci60_dataset) -> None:
        view = nci60_dataset.view(scaling="standard")
        assert view.is_standardized
        pd.testing.assert_frame_equal(view.features, nci60_dataset.df_standardized)

    def test_column_subset(self, nci60_dataset) -> None:
        view = nci60_dataset.view(columns=["g2", "g1"], include_label=False)
        assert list(view.df.columns) == ["g2", "g1"]
        assert view.labels is None

    def test_unknown_column_raises(self, nci60_dataset) -> None:
        with pytest.raises(ValueError, match=r"Unknown descriptor"):
            nci60_dataset.view(columns=["not_a_gene"])

    def test_pretty_names(self, nci60_dataset) -> None:
        view = nci60_dataset.view(columns=["g1"])
        assert view.pretty_by_col[NCICol.LABEL] == "Cancer Type"
        assert view.pretty_by_col["g1"] == "G1"

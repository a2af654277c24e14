"""Loading and validation of the NCI60 gene-expression dataset."""

import logging
from collections.abc import Sequence
from pathlib import Path

import numpy as np
import pandas as pd

from nci60_tlbx.utils.paths import get_data_dir, get_dataset_path

from .base_dataset import BaseDataset
from .nci60_columns import DEFAULT_CANCER_TYPES
from .nci60_columns import NCI60Column as Col


logger = logging.getLogger(__name__)


class NCI60Dataset(BaseDataset):
    """Loading, filtering and normalization for the [NCI60 microarray data](https://rdrr.io/cran/ISLR/man/NCI60.html).

    Rows are cell lines, columns are 6830 gene-expression descriptors plus the
    cancer-type ``label``. Loading keeps only the configured cancer types (by
    default BREAST, RENAL, MELANOMA, NSCLC, COLON, i.e. 40 cell lines) in the
    order they appear in the source, and turns the label into an ordered
    categorical with exactly that category order.

    **Example workflow**:
    >>> from nci60_tlbx.data import NCI60Dataset
    >>> ds = NCI60Dataset.from_csv()
    >>> profile = ds.make_quality_profiler().fit().result()
    >>> suite = ds.make_reduction_suite().fit().result()
    >>> profile.numeric_profile.shape[0], sorted(suite.embeddings)
    (6830, ['ica', 'nmf', 'pca', 'svd', 'tsne', 'umap'])
    """

    Col = Col

    def __init__(self, df: pd.DataFrame | None = None, cancer_types: Sequence[str] = DEFAULT_CANCER_TYPES) -> None:
        super().__init__(df=df)
        self.cancer_types: tuple[str, ...] = tuple(str(c) for c in cancer_types)

    @classmethod
    def from_csv(
        cls,
        csv_path: str | Path | None = None,
        *,
        labels_path: str | Path | None = None,
        label_col: str = "labs",
        cancer_types: Sequence[str] = DEFAULT_CANCER_TYPES,
    ) -> "NCI60Dataset":
        """Load, validate and filter the NCI60 dataset from CSV.

        - Use a leading unnamed column as the sample index
        - Normalize column names
        - Attach labels from ``label_col`` or from a separate labels file
        - Keep only rows of the requested cancer types

        Args:
            csv_path: Path to the expression CSV (defaults to ``_data/nci60_data.csv``)
            labels_path: Optional single-column CSV with one label per data row.
                Defaults to ``_data/nci60_labs.csv`` when the data file has no label column.
            label_col: Name of the label column inside the data CSV
            cancer_types: Cancer types to keep, in category order

        Returns:
            NCI60Dataset with filtered and validated data

        Raises:
            FileNotFoundError: If the data (or required labels) file is unavailable
            ValueError: If the data is malformed (see :meth:`from_frame`)
        """
        csv_path = get_dataset_path("nci60") if csv_path is None else Path(csv_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"NCI60 data file not found at {csv_path}")

        logger.info("Reading NCI60 data from %s", csv_path)
        raw = pd.read_csv(csv_path).pipe(cls._index_from_unnamed)

        if label_col in raw.columns:
            labels = raw[label_col]
            data = raw.drop(columns=[label_col])
        else:
            labels = cls._read_labels(labels_path, index=raw.index)
            data = raw

        return cls.from_frame(data, labels, cancer_types=cancer_types)

    @classmethod
    def from_frame(
        cls,
        data: pd.DataFrame,
        labels: pd.Series | Sequence[str],
        *,
        cancer_types: Sequence[str] = DEFAULT_CANCER_TYPES,
    ) -> "NCI60Dataset":
        """Build the dataset from an in-memory descriptor frame and labels.

        Args:
            data: Numeric descriptor frame, one row per cell line
            labels: Cancer type per row (aligned by position)
            cancer_types: Cancer types to keep, in category order

        Raises:
            ValueError: If labels and data lengths differ, descriptors are non-numeric
                or incomplete, or a requested cancer type has no rows.
        """
        if len(labels) != len(data):
            raise ValueError(f"Got {len(labels)} labels for {len(data)} data rows.")

        cancer_types = tuple(str(c) for c in cancer_types)
        if len(set(cancer_types)) != len(cancer_types) or not cancer_types:
            raise ValueError(f"cancer_types must be non-empty and unique, got {cancer_types}")

        data = data.pipe(cls._normalize_col_names)
        if Col.LABEL in data.columns:
            raise ValueError(f"Descriptor frame must not contain a '{Col.LABEL}' column.")
        cls._validate_descriptors(data)

        label_values = pd.Series(np.asarray(labels), index=data.index).astype(str).str.strip()
        keep = label_values.isin(cancer_types).to_numpy()
        filtered = data.loc[keep].assign(
            **{Col.LABEL: pd.Categorical(label_values[keep], categories=cancer_types, ordered=True)},
        )
        filtered.index.name = Col.SAMPLE

        absent = [c for c in cancer_types if c not in set(label_values[keep])]
        if absent:
            raise ValueError(f"Expected cancer types missing from the data: {absent}")

        logger.info(
            "Kept %d of %d samples across %d cancer types (%d descriptors)",
            len(filtered),
            len(data),
            len(cancer_types),
            data.shape[1],
        )
        return cls(df=filtered, cancer_types=cancer_types)

    @staticmethod
    def _index_from_unnamed(df: pd.DataFrame) -> pd.DataFrame:
        """Use a leading ``Unnamed: 0`` column (R row names) as index."""
        first = str(df.columns[0]) if len(df.columns) else ""
        if first.startswith("Unnamed") or first == "":
            return df.set_index(df.columns[0]).rename_axis(None)
        return df

    @staticmethod
    def _read_labels(labels_path: str | Path | None, index: pd.Index) -> pd.Series:
        if labels_path is None:
            labels_path = get_data_dir() / "nci60_labs.csv"
        labels_path = Path(labels_path)
        if not labels_path.exists():
            raise FileNotFoundError(f"NCI60 labels file not found at {labels_path}")

        labels_df = pd.read_csv(labels_path).pipe(NCI60Dataset._index_from_unnamed)
        if labels_df.shape[1] != 1:
            raise ValueError(f"Labels file must have exactly one column, got {list(labels_df.columns)}")
        if len(labels_df) != len(index):
            raise ValueError(f"Labels file has {len(labels_df)} rows, data has {len(index)}.")
        return pd.Series(labels_df.iloc[:, 0].to_numpy(), index=index, name=Col.LABEL)

    @staticmethod
    def _normalize_col_names(df: pd.DataFrame) -> pd.DataFrame:
        """Standardize descriptor names to snake_case.

        Strip whitespace, convert to lowercase, replace spaces/slashes/hyphens/dots with
        underscores, collapse multiple underscores. Purely numeric names (R exports
        without column names) are prefixed with ``g``.
        """
        names = (
            df.columns.astype(str)
            .str.strip()
            .str.lower()
            .str.replace(r"[\s/\-\.]+", "_", regex=True)
            .str.replace(r"_+", "_", regex=True)
        )
        names = names.where(~names.str.fullmatch(r"\d+"), "g" + names)
        if names.duplicated().any():
            raise ValueError(f"Duplicate descriptor names after normalization: {list(names[names.duplicated()][:5])}")
        return df.set_axis(names, axis=1)

    @staticmethod
    def _validate_descriptors(df: pd.DataFrame) -> None:
        """Every descriptor must be numeric and complete."""
        if df.shape[1] == 0:
            raise ValueError("No descriptor columns found.")

        non_numeric = df.columns.difference(df.select_dtypes(include=["number"]).columns, sort=False)
        if len(non_numeric):
            raise ValueError(f"Non-numeric descriptor columns: {list(non_numeric[:10])}")

        n_missing = int(df.isna().sum().sum())
        if n_missing:
            raise ValueError(f"Descriptor matrix contains {n_missing} missing values.")

    def label_counts(self) -> pd.Series:
        """Number of samples per cancer type, in category order."""
        return self.df[Col.LABEL].value_counts(sort=False)

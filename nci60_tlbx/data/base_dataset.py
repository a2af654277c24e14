"""Base dataset class for all dataset implementations."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd
from sklearn.preprocessing import MinMaxScaler, StandardScaler


if TYPE_CHECKING:
    from nci60_tlbx.analysis.pca_analyzer import PCAAnalyzer
    from nci60_tlbx.analysis.quality_profiler import QualityProfiler, QualityThresholds
    from nci60_tlbx.analysis.reduction_suite import ReductionConfig, ReductionSuite

from .base_columns import BaseColumn
from .views import DatasetView, Scaling


class BaseDataset(ABC):
    """Abstract base class for dataset handlers used throughout the toolbox.

    Holds the cleaned frame plus lazily computed scaled copies. Scaling is
    always fitted per descriptor column; the fitted scalers are kept so the
    transforms can be inverted.
    """

    Col: type[BaseColumn]

    def __init__(self, df: pd.DataFrame | None = None) -> None:
        """Initialize the base dataset.

        Args:
            df: Pre-loaded and cleaned DataFrame (optional)
        """
        self._df: pd.DataFrame | None = df
        self._scaler: StandardScaler | None = None
        self._min_max_scaler: MinMaxScaler | None = None
        self._df_standardized: pd.DataFrame | None = None
        self._df_min_max: pd.DataFrame | None = None

    @classmethod
    @abstractmethod
    def from_csv(cls, csv_path: str | Path | None = None, **kwargs: object) -> "BaseDataset":
        """Load dataset from CSV file.

        Args:
            csv_path: Path to the CSV file
            **kwargs: Additional loading parameters

        Returns:
            Dataset instance with loaded data
        """
        ...

    @property
    def df(self) -> pd.DataFrame:
        """Get the raw/cleaned DataFrame.

        Raises:
            ValueError: If dataset not loaded
        """
        if self._df is None:
            raise ValueError("Dataset not loaded. Use from_csv() to load data.")
        return self._df

    @property
    def numeric_cols(self) -> pd.Index:
        """Get numeric descriptor column names.

        Default implementation filters columns by numeric dtypes and drops the
        enumerated non-descriptor columns.
        """
        return self.df.select_dtypes(include=["number"]).columns.difference(
            self.Col.non_descriptor_columns(),
            sort=False,
        )

    @property
    def df_standardized(self) -> pd.DataFrame:
        """Get the standardized descriptor frame.

        X <- (X - E[X]) / sd(X)
        """
        if self._df_standardized is None:
            self._df_standardized = self.standardize()
        return self._df_standardized

    @property
    def df_min_max(self) -> pd.DataFrame:
        """Get the min-max scaled descriptor frame.

        X <- (X - min(X)) / (max(X) - min(X))
        """
        if self._df_min_max is None:
            self._df_min_max = self.min_max_scale()
        return self._df_min_max

    def standardize(self, df: pd.DataFrame | None = None) -> pd.DataFrame:
        """Compute standardized descriptors with [sklearn's StandardScaler](https://scikit-learn.org/stable/modules/generated/sklearn.preprocessing.StandardScaler.html).

        Returns:
            DataFrame with numeric columns scaled to mean=0, std=1 (sample std, ddof=1).
            Constant columns keep a unit scale and map to 0.
        """
        if df is None:
            df = self.df

        numeric = df[self.numeric_cols]
        self._scaler = StandardScaler().fit(numeric)
        # StandardScaler divides by the population std; rescale to the sample std
        sample_std = numeric.std(ddof=1).to_numpy(dtype=float)
        self._scaler.scale_ = np.where(np.isfinite(sample_std) & (sample_std > 0), sample_std, 1.0)
        scaled_data = self._scaler.transform(numeric)

        return pd.DataFrame(
            scaled_data,
            columns=self.numeric_cols,
            index=df.index,
        )

    def min_max_scale(self, df: pd.DataFrame | None = None) -> pd.DataFrame:
        """Rescale each descriptor to [0, 1] with [sklearn's MinMaxScaler](https://scikit-learn.org/stable/modules/generated/sklearn.preprocessing.MinMaxScaler.html).

        Constant columns map to 0.
        """
        if df is None:
            df = self.df

        self._min_max_scaler = MinMaxScaler()
        scaled_data = self._min_max_scaler.fit_transform(df[self.numeric_cols])

        return pd.DataFrame(
            scaled_data,
            columns=self.numeric_cols,
            index=df.index,
        )

    def inverse_standardize(self, scaled: pd.DataFrame) -> pd.DataFrame:
        """Map standardized descriptors back to the raw scale."""
        if self._scaler is None:
            _ = self.df_standardized
        return pd.DataFrame(
            self._scaler.inverse_transform(scaled[self.numeric_cols]),
            columns=self.numeric_cols,
            index=scaled.index,
        )

    def inverse_min_max(self, scaled: pd.DataFrame) -> pd.DataFrame:
        """Map min-max scaled descriptors back to the raw scale."""
        if self._min_max_scaler is None:
            _ = self.df_min_max
        return pd.DataFrame(
            self._min_max_scaler.inverse_transform(scaled[self.numeric_cols]),
            columns=self.numeric_cols,
            index=scaled.index,
        )

    def scaled(self, scaling: Scaling = "none") -> pd.DataFrame:
        """Return the descriptor frame for the requested scaling."""
        if scaling == "standard":
            return self.df_standardized
        if scaling == "min_max":
            return self.df_min_max
        if scaling == "none":
            return self.df[self.numeric_cols]
        raise ValueError(f"Invalid scaling='{scaling}'. Use 'none', 'standard' or 'min_max'.")

    def view(
        self,
        columns: Iterable[str] | None = None,
        scaling: Scaling = "none",
        include_label: bool = True,
    ) -> DatasetView:
        """Build an immutable dataset view for analyzers and plotting layers.

        Args:
            columns: Descriptor columns to include in the view (defaults to all)
            scaling: Which descriptor matrix to expose ("none", "standard", "min_max")
            include_label: Attach the label column to the view

        Returns:
            DatasetView containing selected data and metadata
        """
        frame = self.scaled(scaling)

        selected_cols = list(columns) if columns is not None else frame.columns.to_list()
        missing = [col for col in selected_cols if col not in frame.columns]
        if missing:
            raise ValueError(f"Unknown descriptor columns requested: {missing[:10]}")
        frame = frame.loc[:, selected_cols]

        label_col = self.Col.LABEL if include_label and self.Col.LABEL in self.df.columns else None
        if label_col is not None:
            frame = frame.assign(**{label_col: self.df[label_col]})

        return DatasetView(
            df=frame,
            pretty_by_col={col: self.get_pretty_name(col) for col in frame.columns},
            numeric_cols=selected_cols,
            label_col=label_col,
            scaling=scaling,
        )

    def get_pretty_name(self, column_name: str) -> str:
        """Convert column name to pretty name for visualization."""
        try:
            col_enum = self.Col(column_name)
        except ValueError:
            # Fallback: capitalize and replace underscores if not in enum
            return column_name.replace("_", " ").title()
        else:
            return str(col_enum.pretty_name)

    def make_quality_profiler(
        self,
        columns: Iterable[str] | None = None,
        thresholds: "QualityThresholds | None" = None,
    ) -> "QualityProfiler":
        """Instantiate a data-quality profiler over the raw (unscaled) data."""
        from nci60_tlbx.analysis.quality_profiler import QualityProfiler

        return QualityProfiler(self.view(columns=columns, scaling="none"), thresholds=thresholds)

    def make_pca_analyzer(
        self,
        columns: Iterable[str] | None = None,
        scaling: Scaling = "standard",
    ) -> "PCAAnalyzer":
        """Instantiate a PCA analyzer configured for this dataset."""
        from nci60_tlbx.analysis.pca_analyzer import PCAAnalyzer

        return PCAAnalyzer(self.view(columns=columns, scaling=scaling))

    def make_reduction_suite(
        self,
        columns: Iterable[str] | None = None,
        config: "ReductionConfig | None" = None,
    ) -> "ReductionSuite":
        """Instantiate the six-technique reduction suite.

        NMF receives the min-max view, every other technique the standardized view.

        Example:
            >>> from nci60_tlbx.data import NCI60Dataset
            >>> suite = NCI60Dataset.from_csv().make_reduction_suite().fit().result()
            >>> suite.embeddings["tsne"].embedding.shape
            (40, 2)
        """
        from nci60_tlbx.analysis.reduction_suite import ReductionSuite

        return ReductionSuite(
            standardized=self.view(columns=columns, scaling="standard"),
            min_max=self.view(columns=columns, scaling="min_max"),
            config=config,
        )

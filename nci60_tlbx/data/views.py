"""Task-specific views over dataset content."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

import pandas as pd


Scaling = Literal["none", "standard", "min_max"]


@dataclass(frozen=True)
class DatasetView:
    """Immutable snapshot of dataset data and related metadata.

    Attributes:
        df: Dataframe slice containing the relevant columns.
        pretty_by_col: Mapping from normalized column names to display-friendly labels.
        numeric_cols: Ordered list of numeric descriptor names present in ``df``.
        label_col: Optional name of the categorical class column.
        scaling: Which per-column scaling the descriptors carry.
    """

    df: pd.DataFrame
    """Dataframe slice containing the relevant columns."""
    pretty_by_col: Mapping[str, str]
    """Mapping from normalized column names to display-friendly labels."""
    numeric_cols: list[str]
    label_col: str | None = None
    scaling: Scaling = "none"
    """``"standard"`` for zero mean / unit variance, ``"min_max"`` for values in [0, 1]."""

    @property
    def features(self) -> pd.DataFrame:
        """Return view over numeric descriptor columns."""
        cols = self.numeric_cols or [c for c in self.df.columns if c != self.label_col]
        return self.df.loc[:, cols]

    @property
    def labels(self) -> pd.Series | None:
        """Return the class labels aligned to ``df`` (``None`` without a label column)."""
        if self.label_col is None or self.label_col not in self.df.columns:
            return None
        return self.df[self.label_col]

    @property
    def is_standardized(self) -> bool:
        return self.scaling == "standard"

"""Per-column data-quality profiling (modes, uniqueness, moments, quantiles)."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Self

import numpy as np
import pandas as pd
from scipy import stats

from nci60_tlbx.data.views import DatasetView

from .base_analyser import BaseAnalyser


logger = logging.getLogger(__name__)

SECOND_MODE_SENTINEL = 0.00001
"""Stand-in second-mode value (and ratio denominator) when a column has no second mode."""
SECOND_MODE_SENTINEL_CATEGORICAL = "x"
"""Stand-in second-mode value for categorical columns."""

Flag = Literal["low_variance_mode_ratio", "low_variance_unique", "high_skew"]
FLAGS: tuple[Flag, ...] = ("low_variance_mode_ratio", "low_variance_unique", "high_skew")

_MODE_COLUMNS = [
    "first_mode",
    "first_mode_count",
    "second_mode",
    "second_mode_count",
    "mode_ratio",
    "second_mode_missing",
]


@dataclass(frozen=True)
class QualityThresholds:
    """Cut-offs for the informational quality flags.

    Attributes:
        max_mode_ratio: Flag ``low_variance_mode_ratio`` when first/second mode ratio exceeds this.
        min_unique_ratio: Flag ``low_variance_unique`` when unique/rows falls below this.
        max_abs_skew: Flag ``high_skew`` when |skewness| exceeds this.
    """

    max_mode_ratio: float = 5.0
    min_unique_ratio: float = 0.01
    max_abs_skew: float = 3.0


@dataclass(frozen=True)
class ModeSummary:
    """First and second mode of a single column."""

    first_mode: object
    first_mode_count: int
    second_mode: object
    second_mode_count: int
    mode_ratio: float
    second_mode_missing: bool


def mode_summary(values: pd.Series, sentinel: object = SECOND_MODE_SENTINEL) -> ModeSummary:
    """Compute first and second mode and their count ratio.

    The second mode is the most frequent value once every occurrence of the first
    mode is removed. Ties are broken by the smaller value. When nothing remains,
    ``sentinel`` stands in for the second mode, its count is 0 and the ratio is
    taken against :data:`SECOND_MODE_SENTINEL` so it stays finite.

    Example:
        >>> mode_summary(pd.Series([1, 1, 1, 2, 2, 3])).mode_ratio
        1.5
    """
    counts = values.dropna().value_counts(sort=False)
    counts = counts[counts > 0].sort_index(kind="stable").sort_values(ascending=False, kind="stable")

    if counts.empty:
        return ModeSummary(np.nan, 0, sentinel, 0, 0.0, True)

    first_mode, first_count = counts.index[0], int(counts.iloc[0])
    if len(counts) == 1:
        return ModeSummary(first_mode, first_count, sentinel, 0, first_count / SECOND_MODE_SENTINEL, True)

    second_mode, second_count = counts.index[1], int(counts.iloc[1])
    return ModeSummary(first_mode, first_count, second_mode, second_count, first_count / second_count, False)


@dataclass(frozen=True)
class QualityProfileResult:
    """Quality-assessment tables at full numeric precision.

    Attributes:
        numeric_profile: One row per numeric descriptor; columns ``type``, ``fill_rate``,
            ``n_unique``, ``unique_ratio``, mode columns, ``min``, ``mean``, ``median``,
            ``max``, ``q25``, ``q75``, ``skewness``, ``kurtosis`` (excess, biased).
        categorical_profile: One row per categorical column (the label) with type, fill
            rate, uniqueness and mode columns.
        flags: Boolean frame (index = descriptors) with one column per flag.
        thresholds: Thresholds used to compute ``flags``.
        n_rows: Number of observations profiled.
    """

    numeric_profile: pd.DataFrame
    categorical_profile: pd.DataFrame
    flags: pd.DataFrame
    thresholds: QualityThresholds
    n_rows: int

    def flagged_columns(self, flag: Flag) -> pd.Index:
        """Descriptors raising ``flag``."""
        if flag not in self.flags.columns:
            raise ValueError(f"Unknown flag '{flag}'. Use one of {FLAGS}.")
        return self.flags.index[self.flags[flag]]

    def flag_summary(self) -> pd.Series:
        """Number of descriptors raising each flag."""
        return self.flags.sum().astype(int).rename("n_columns")

    def formatted(self, kind: Literal["numeric", "categorical"] = "numeric", decimals: int = 3) -> pd.DataFrame:
        """Display copy of a profile table, floats rounded to ``decimals``.

        Numeric tables carry the flag columns; sentinel second modes are kept verbatim.
        """
        if kind == "categorical":
            return self.categorical_profile.round(decimals)

        display = self.numeric_profile.round(decimals).join(self.flags)
        missing = self.numeric_profile["second_mode_missing"].to_numpy()
        display.loc[missing, "second_mode"] = SECOND_MODE_SENTINEL
        return display

    def to_csv(
        self,
        path: str | Path,
        kind: Literal["numeric", "categorical"] = "numeric",
        decimals: int | None = 3,
    ) -> Path:
        """Export a profile table; ``decimals=None`` keeps full precision."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if decimals is None:
            table = self.numeric_profile.join(self.flags) if kind == "numeric" else self.categorical_profile
        else:
            table = self.formatted(kind, decimals=decimals)
        table.to_csv(path, index_label="column")
        return path

    def plot_flags(self, **kwargs: object):
        """Plot flag counts and moment distributions."""
        from nci60_tlbx.plotting.quality_plots import plot_quality_flags  # noqa: PLC0415

        return plot_quality_flags(self, **kwargs)


class QualityProfiler(BaseAnalyser):
    """Profile every column of a dataset view for data-quality review.

    Flags are informational only: no column is removed or transformed.

    Example:
        >>> from nci60_tlbx.data import NCI60Dataset
        >>> profile = NCI60Dataset.from_csv().make_quality_profiler().fit().result()
        >>> profile.flag_summary()
        >>> profile.formatted().head()
    """

    def __init__(self, view: DatasetView, thresholds: QualityThresholds | None = None) -> None:
        """Initialize the profiler.

        Args:
            view: Dataset view over the raw (unscaled) data
            thresholds: Flag thresholds (defaults to :class:`QualityThresholds`)
        """
        self._view = view
        self.thresholds = thresholds or QualityThresholds()
        self._fitted = False
        self._numeric_profile: pd.DataFrame | None = None
        self._categorical_profile: pd.DataFrame | None = None
        self._flags: pd.DataFrame | None = None

    def fit(self) -> Self:
        """Compute numeric and categorical profiles and raise flags."""
        features = self._view.features
        logger.info("Profiling %d numeric columns over %d rows", features.shape[1], features.shape[0])

        self._numeric_profile = self._profile_numeric(features)
        self._categorical_profile = self._profile_categorical(self._categorical_frame())
        self._flags = self._compute_flags(self._numeric_profile)
        self._fitted = True

        flagged = self._flags.sum()
        logger.info("Quality flags raised: %s", ", ".join(f"{k}={int(v)}" for k, v in flagged.items()))
        return self

    def _categorical_frame(self) -> pd.DataFrame:
        non_numeric = [c for c in self._view.df.columns if c not in self._view.numeric_cols]
        return self._view.df.loc[:, non_numeric]

    @staticmethod
    def _profile_numeric(features: pd.DataFrame) -> pd.DataFrame:
        n_rows = len(features)
        values = features.to_numpy(dtype=float)

        modes = pd.DataFrame(
            [vars(mode_summary(features[col])) for col in features.columns],
            index=features.columns,
            columns=_MODE_COLUMNS,
        )
        n_unique = features.nunique()

        summary = pd.DataFrame(
            {
                "type": features.dtypes.astype(str),
                "fill_rate": features.notna().sum() / n_rows,
                "n_unique": n_unique,
                "unique_ratio": n_unique / n_rows,
            },
        ).join(modes)

        with np.errstate(all="ignore"):
            moments = pd.DataFrame(
                {
                    "min": features.min(),
                    "mean": features.mean(),
                    "median": features.median(),
                    "max": features.max(),
                    "q25": features.quantile(0.25),
                    "q75": features.quantile(0.75),
                    "skewness": np.asarray(stats.skew(values, axis=0, bias=True, nan_policy="omit")),
                    "kurtosis": np.asarray(
                        stats.kurtosis(values, axis=0, fisher=True, bias=True, nan_policy="omit"),
                    ),
                },
                index=features.columns,
            )
        return summary.join(moments)

    @staticmethod
    def _profile_categorical(frame: pd.DataFrame) -> pd.DataFrame:
        n_rows = len(frame)
        rows = {}
        for col in frame.columns:
            series = frame[col]
            n_unique = int(series.nunique())
            rows[col] = {
                "type": str(series.dtype),
                "fill_rate": series.notna().sum() / n_rows if n_rows else np.nan,
                "n_unique": n_unique,
                "unique_ratio": n_unique / n_rows if n_rows else np.nan,
                **vars(mode_summary(series.astype(object), sentinel=SECOND_MODE_SENTINEL_CATEGORICAL)),
            }
        return pd.DataFrame.from_dict(
            rows,
            orient="index",
            columns=["type", "fill_rate", "n_unique", "unique_ratio", *_MODE_COLUMNS],
        )

    def _compute_flags(self, profile: pd.DataFrame) -> pd.DataFrame:
        thr = self.thresholds
        return pd.DataFrame(
            {
                "low_variance_mode_ratio": profile["mode_ratio"] > thr.max_mode_ratio,
                "low_variance_unique": profile["unique_ratio"] < thr.min_unique_ratio,
                "high_skew": profile["skewness"].abs() > thr.max_abs_skew,
            },
            index=profile.index,
        )

    def result(self) -> QualityProfileResult:
        """Return the profile tables and flags.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        if not self._fitted or self._numeric_profile is None:
            raise ValueError("Must call fit() before result()")

        return QualityProfileResult(
            numeric_profile=self._numeric_profile,
            categorical_profile=self._categorical_profile,
            flags=self._flags,
            thresholds=self.thresholds,
            n_rows=len(self._view.df),
        )

"""Tests for QualityProfiler and mode_summary."""

import numpy as np
import pandas as pd
import pytest

from nci60_tlbx.analysis import (
    SECOND_MODE_SENTINEL,
    SECOND_MODE_SENTINEL_CATEGORICAL,
    QualityProfiler,
    QualityProfileResult,
    QualityThresholds,
    mode_summary,
)
from nci60_tlbx.data import DatasetView


class TestModeSummary:
    """Test first/second mode computation."""

    def test_first_and_second_mode(self) -> None:
        summary = mode_summary(pd.Series([1, 1, 1, 2, 2, 3]))
        assert summary.first_mode == 1
        assert summary.first_mode_count == 3
        assert summary.second_mode == 2
        assert summary.second_mode_count == 2
        assert summary.mode_ratio == pytest.approx(1.5)
        assert not summary.second_mode_missing

    def test_constant_column_uses_sentinel(self) -> None:
        summary = mode_summary(pd.Series([4.0] * 10))
        assert summary.first_mode == 4.0
        assert summary.second_mode == SECOND_MODE_SENTINEL
        assert summary.second_mode_count == 0
        assert summary.second_mode_missing
        assert summary.mode_ratio == pytest.approx(10 / SECOND_MODE_SENTINEL)
        assert np.isfinite(summary.mode_ratio)

    def test_ties_break_to_smaller_value(self) -> None:
        summary = mode_summary(pd.Series([5, 3, 5, 3, 9]))
        assert summary.first_mode == 3
        assert summary.second_mode == 5
        assert summary.mode_ratio == pytest.approx(1.0)

    def test_all_unique_values_have_second_mode(self) -> None:
        summary = mode_summary(pd.Series([0.3, 0.1, 0.2]))
        assert summary.first_mode == pytest.approx(0.1)
        assert summary.second_mode == pytest.approx(0.2)
        assert not summary.second_mode_missing

    def test_empty_column(self) -> None:
        summary = mode_summary(pd.Series([np.nan, np.nan]))
        assert np.isnan(summary.first_mode)
        assert summary.second_mode_missing
        assert summary.mode_ratio == 0.0

    def test_categorical_sentinel(self) -> None:
        summary = mode_summary(pd.Series(["a", "a"]), sentinel=SECOND_MODE_SENTINEL_CATEGORICAL)
        assert summary.second_mode == "x"


class TestQualityProfiler:
    """Test profiling over a small hand-built view."""

    @pytest.fixture
    def sample_view(self) -> DatasetView:
        rng = np.random.default_rng(3)
        n = 40
        data = pd.DataFrame(
            {
                "normal": rng.normal(size=n),
                "constant": np.full(n, 2.0),
                "spike": np.r_[100.0, np.zeros(n - 1)],
                "modes": np.tile([1.0, 1.0, 1.0, 2.0, 2.0, 3.0, 4.0, 5.0], n // 8),
                "label": pd.Categorical(["BREAST", "RENAL", "COLON", "NSCLC"] * (n // 4)),
            },
        )
        return DatasetView(
            df=data,
            pretty_by_col={c: c for c in data.columns},
            numeric_cols=["normal", "constant", "spike", "modes"],
            label_col="label",
        )

    @pytest.fixture
    def result(self, sample_view: DatasetView) -> QualityProfileResult:
        return QualityProfiler(sample_view).fit().result()

    def test_fit_returns_self(self, sample_view: DatasetView) -> None:
        profiler = QualityProfiler(sample_view)
        assert profiler.fit() is profiler

    def test_result_before_fit_raises(self, sample_view: DatasetView) -> None:
        with pytest.raises(ValueError, match=r"fit\(\)"):
            QualityProfiler(sample_view).result()

    def test_one_row_per_descriptor(self, result: QualityProfileResult) -> None:
        assert result.numeric_profile.index.to_list() == ["normal", "constant", "spike", "modes"]
        assert result.n_rows == 40

    def test_profile_columns(self, result: QualityProfileResult) -> None:
        expected = {
            "type",
            "fill_rate",
            "n_unique",
            "unique_ratio",
            "first_mode",
            "first_mode_count",
            "second_mode",
            "second_mode_count",
            "mode_ratio",
            "second_mode_missing",
            "min",
            "mean",
            "median",
            "max",
            "q25",
            "q75",
            "skewness",
            "kurtosis",
        }
        assert expected <= set(result.numeric_profile.columns)

    def test_descriptive_statistics(self, result: QualityProfileResult, sample_view: DatasetView) -> None:
        row = result.numeric_profile.loc["normal"]
        values = sample_view.df["normal"]
        assert row["fill_rate"] == 1.0
        assert row["mean"] == pytest.approx(values.mean())
        assert row["median"] == pytest.approx(values.median())
        assert row["q25"] == pytest.approx(values.quantile(0.25))
        assert row["q75"] == pytest.approx(values.quantile(0.75))

    def test_mode_ratio(self, result: QualityProfileResult) -> None:
        row = result.numeric_profile.loc["modes"]
        assert row["first_mode"] == 1.0
        assert row["second_mode"] == 2.0
        assert row["mode_ratio"] == pytest.approx(1.5)

    def test_constant_column_sentinel(self, result: QualityProfileResult) -> None:
        row = result.numeric_profile.loc["constant"]
        assert bool(row["second_mode_missing"])
        assert row["second_mode"] == SECOND_MODE_SENTINEL
        assert result.flags.loc["constant", "low_variance_mode_ratio"]

    def test_high_skew_flag(self, result: QualityProfileResult) -> None:
        assert result.numeric_profile.loc["spike", "skewness"] > 3
        assert result.flags.loc["spike", "high_skew"]
        assert abs(result.numeric_profile.loc["normal", "skewness"]) <= 3
        assert not result.flags.loc["normal", "high_skew"]
        assert "spike" in result.flagged_columns("high_skew")

    def test_unique_ratio_flag_threshold(self, sample_view: DatasetView) -> None:
        result = QualityProfiler(sample_view, QualityThresholds(min_unique_ratio=0.2)).fit().result()
        assert result.flagged_columns("low_variance_unique").to_list() == ["constant", "spike", "modes"]

    def test_unknown_flag_raises(self, result: QualityProfileResult) -> None:
        with pytest.raises(ValueError, match=r"Unknown flag"):
            result.flagged_columns("too_many_zeros")  # type: ignore[arg-type]

    def test_flag_summary(self, result: QualityProfileResult) -> None:
        summary = result.flag_summary()
        assert summary["high_skew"] == 1
        assert summary.index.to_list() == ["low_variance_mode_ratio", "low_variance_unique", "high_skew"]

    def test_categorical_profile(self, result: QualityProfileResult) -> None:
        row = result.categorical_profile.loc["label"]
        assert row["n_unique"] == 4
        assert row["fill_rate"] == 1.0
        assert row["first_mode_count"] == 10
        assert row["mode_ratio"] == pytest.approx(1.0)

    def test_formatted_rounds_but_keeps_sentinel(self, result: QualityProfileResult) -> None:
        display = result.formatted(decimals=3)
        assert display.loc["constant", "second_mode"] == SECOND_MODE_SENTINEL
        mean = display.loc["normal", "mean"]
        assert mean == round(mean, 3)
        assert "high_skew" in display.columns
        assert result.numeric_profile.loc["normal", "mean"] == pytest.approx(mean, abs=5e-4)

    def test_to_csv(self, result: QualityProfileResult, tmp_path) -> None:
        path = result.to_csv(tmp_path / "out" / "quality.csv")
        table = pd.read_csv(path, index_col="column")
        assert table.index.to_list() == ["normal", "constant", "spike", "modes"]
        assert table.loc["constant", "second_mode"] == pytest.approx(SECOND_MODE_SENTINEL)

    def test_dataset_factory(self, nci60_dataset) -> None:
        result = nci60_dataset.make_quality_profiler().fit().result()
        assert len(result.numeric_profile) == len(nci60_dataset.numeric_cols)
        assert result.flags.loc["g58", "high_skew"]
        assert result.numeric_profile.loc["g57", "second_mode_missing"]

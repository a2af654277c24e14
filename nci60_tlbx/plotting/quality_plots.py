"""Data-quality profile visualizations."""

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns
from matplotlib.figure import Figure

from nci60_tlbx.analysis.quality_profiler import QualityProfileResult


def plot_quality_flags(
    result: QualityProfileResult,
    figsize: tuple[int, int] = (18, 5),
    bins: int = 60,
) -> Figure:
    """Flag counts next to the skewness and mode-ratio distributions with their thresholds.

    Args:
        result: Profile from :class:`QualityProfiler`.
        figsize: Figure size.
        bins: Histogram bins.
    """
    thr = result.thresholds
    profile = result.numeric_profile
    fig, (ax_flags, ax_skew, ax_ratio) = plt.subplots(1, 3, figsize=figsize)

    summary = result.flag_summary()
    sns.barplot(x=summary.index, y=summary.to_numpy(), color="tab:blue", ax=ax_flags)
    for i, count in enumerate(summary.to_numpy()):
        ax_flags.text(i, count, str(count), ha="center", va="bottom", fontsize=9)
    ax_flags.set_title(f"Flagged Descriptors (of {len(profile)})")
    ax_flags.set_ylabel("Number of descriptors")
    ax_flags.tick_params(axis="x", rotation=20)

    sns.histplot(profile["skewness"].dropna(), bins=bins, ax=ax_skew, color="tab:green")
    for x in (-thr.max_abs_skew, thr.max_abs_skew):
        ax_skew.axvline(x, color="tab:red", linestyle="--", linewidth=1)
    ax_skew.set_title("Skewness")

    # Sentinel ratios are huge; show them on a log axis
    ratios = profile["mode_ratio"].replace(0, np.nan).dropna()
    sns.histplot(np.log10(ratios), bins=bins, ax=ax_ratio, color="tab:purple")
    ax_ratio.axvline(np.log10(thr.max_mode_ratio), color="tab:red", linestyle="--", linewidth=1)
    ax_ratio.set_xlabel("log10(first / second mode count)")
    ax_ratio.set_title("Mode Ratio")

    fig.tight_layout()
    return fig


def plot_moment_scatter(
    result: QualityProfileResult,
    figsize: tuple[int, int] = (7, 6),
) -> Figure:
    """Skewness against excess kurtosis per descriptor, high-skew descriptors highlighted."""
    data = result.numeric_profile[["skewness", "kurtosis"]].assign(
        high_skew=result.flags["high_skew"].map({True: "high skew", False: "ok"}),
    )
    fig, ax = plt.subplots(figsize=figsize)
    sns.scatterplot(
        data=data,
        x="skewness",
        y="kurtosis",
        hue="high_skew",
        hue_order=["ok", "high skew"],
        palette={"ok": "tab:blue", "high skew": "tab:red"},
        s=12,
        alpha=0.6,
        ax=ax,
    )
    ax.set_title("Skewness vs. Excess Kurtosis")
    ax.legend(title="")
    fig.tight_layout()
    return fig

"""PCA visualization functions."""

from typing import Literal

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns
from matplotlib.figure import Figure

from nci60_tlbx.analysis.pca_analyzer import PCAResult
from nci60_tlbx.utils.plotting_config import PlottingConfig

from ._labels import label_order, label_palette


def plot_explained_variance(
    result: PCAResult,
    figsize: tuple[int, int] = (10, 6),
    bar: Literal["explained_ratio", "variance"] = "explained_ratio",
    n_components: int | None = 15,
) -> Figure:
    """Plot explained variance (or explained ratio) with cumulative curve.

    Combines [:func:`seaborn.barplot`](https://seaborn.pydata.org/generated/seaborn.barplot.html) and
    [:func:`seaborn.lineplot`](https://seaborn.pydata.org/generated/seaborn.lineplot.html) to mirror the
    classic PCA scree plot. Only the first ``n_components`` are drawn.
    """
    explained = result.explained_variance.iloc[:n_components]
    fig, ax1 = plt.subplots(figsize=figsize)
    x = np.arange(len(explained))
    sns.barplot(x=x, y=explained[bar].to_numpy(), ax=ax1, color="skyblue")
    ax1.set_xlabel("Principal Component")
    ax1.set_ylabel(bar.replace("_", " ").title(), color="blue")
    ax1.tick_params(axis="y", labelcolor="blue")

    ax2 = ax1.twinx()
    sns.lineplot(x=x, y=explained["cumulative_ratio"].to_numpy(), marker="o", color="red", ax=ax2)
    ax2.set_ylabel("Cumulative Variance Explained", color="red")
    ax2.set_ylim(0, 1.05)
    ax2.set_yticks(np.arange(0, 1.1, 0.1))
    ax2.tick_params(axis="y", labelcolor="red")

    ax1.set_xticks(x)
    ax1.set_xticklabels(explained["PC"], rotation=45)
    ax1.set_title("PCA Explained Variance")
    ax1.grid(True, alpha=0.2)
    fig.tight_layout()
    return fig


def plot_loadings_heatmap(
    result: PCAResult,
    n_components: int = 3,
    top_n_features: int = 20,
    figsize: tuple[int, int] = (8, 10),
) -> Figure:
    """Heatmap of loadings for the descriptors loading strongest on the leading PCs.

    Displays component loadings via [:func:`seaborn.heatmap`](https://seaborn.pydata.org/generated/seaborn.heatmap.html).
    """
    pc_cols = [f"PC{i}" for i in range(1, n_components + 1)]
    missing = [pc for pc in pc_cols if pc not in result.loadings.columns]
    if missing:
        raise ValueError(f"Requested components {missing} not available. Available: {list(result.loadings.columns)}")

    strength = result.loadings[pc_cols].pow(2).sum(axis=1).pow(0.5)
    ranked = strength.sort_values(ascending=False).index[:top_n_features]
    loadings = result.loadings.loc[ranked, pc_cols]

    fig, ax = plt.subplots(figsize=figsize)
    sns.heatmap(loadings, annot=top_n_features <= 30, fmt=".2f", cmap="coolwarm", center=0, ax=ax)
    ax.set_title(f"PCA Loadings for Top {top_n_features} Descriptors")
    fig.tight_layout()
    return fig


def plot_pca_scatter_matrix(
    result: PCAResult,
    n_components: int = 5,
    height: float = 2.2,
    cfg: PlottingConfig | None = None,
) -> Figure:
    """Scatter matrix of the first ``n_components`` PC scores coloured by label.

    Built with [:func:`seaborn.pairplot`](https://seaborn.pydata.org/generated/seaborn.pairplot.html);
    the diagonal shows per-class score densities.
    """
    if result.labels is None:
        raise ValueError("PCAResult carries no labels to colour the scatter matrix.")
    pc_cols = list(result.scores.columns[:n_components])
    if len(pc_cols) < 2:
        raise ValueError("Need at least two principal components for a scatter matrix.")

    label_name = result.labels.name or "label"
    data = result.scores[pc_cols].assign(**{label_name: result.labels.astype(str)})
    grid = sns.pairplot(
        data,
        vars=pc_cols,
        hue=label_name,
        hue_order=label_order(result.labels),
        palette=label_palette(result.labels, cfg),
        height=height,
        plot_kws={"s": 25, "alpha": 0.85},
    )
    grid.figure.suptitle(f"PCA Scatter Matrix (PC1-PC{len(pc_cols)})", y=1.02)
    return grid.figure

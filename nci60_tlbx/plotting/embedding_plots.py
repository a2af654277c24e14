"""Embedding comparison plots for the reduction suite."""

import math

import matplotlib.pyplot as plt
import plotly.graph_objects as go
import seaborn as sns
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from nci60_tlbx.analysis.reduction_suite import EmbeddingResult, ReductionSuiteResult, Technique
from nci60_tlbx.utils.plotting_config import PlottingConfig

from ._labels import label_order, label_palette


def plot_embedding_scatter(
    result: EmbeddingResult,
    ax: Axes | None = None,
    figsize: tuple[int, int] = (7, 6),
    legend: bool = True,
    cfg: PlottingConfig | None = None,
) -> Figure:
    """Scatter the first two embedding dimensions, coloured by label.

    Uses [:func:`seaborn.scatterplot`](https://seaborn.pydata.org/generated/seaborn.scatterplot.html).
    """
    if result.embedding.shape[1] < 2:
        raise ValueError(f"{result.name} embedding has fewer than two dimensions.")
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    x_col, y_col = result.pair.columns
    data = result.pair.copy()
    hue_kwargs = {}
    if result.labels is not None:
        data["label"] = result.labels.astype(str)
        hue_kwargs = {
            "hue": "label",
            "hue_order": label_order(result.labels),
            "palette": label_palette(result.labels, cfg),
        }

    sns.scatterplot(data=data, x=x_col, y=y_col, s=45, alpha=0.9, legend=legend, ax=ax, **hue_kwargs)
    ax.set_title(result.name)
    ax.set_xlabel(x_col)
    ax.set_ylabel(y_col)
    if legend and result.labels is not None:
        ax.legend(title="Cancer type", fontsize=8, title_fontsize=9, loc="best")
    return fig


def plot_embedding_grid(
    result: ReductionSuiteResult,
    ncols: int = 3,
    panel_size: tuple[float, float] = (5, 4.5),
    cfg: PlottingConfig | None = None,
) -> Figure:
    """Juxtapose the two-dimensional embedding of every requested technique.

    Techniques that failed (or were not run) get an annotated empty panel instead
    of silently disappearing from the comparison.
    """
    techniques = result.techniques or list(Technique)
    nrows = math.ceil(len(techniques) / ncols)
    fig, axes = plt.subplots(
        nrows,
        ncols,
        figsize=(panel_size[0] * ncols, panel_size[1] * nrows),
        squeeze=False,
    )
    flat_axes = axes.ravel()

    for i, (technique, ax) in enumerate(zip(techniques, flat_axes, strict=False)):
        emb = result.get(technique)
        if emb is None:
            _draw_unavailable(ax, technique, result.failures.get(technique.value))
            continue
        plot_embedding_scatter(emb, ax=ax, legend=i == 0, cfg=cfg)
        score = emb.separation_score()
        if not math.isnan(score):
            ax.set_title(f"{emb.name} (silhouette {score:.2f})")

    for ax in flat_axes[len(techniques) :]:
        ax.set_visible(False)

    fig.suptitle("Dimensionality Reduction Comparison")
    fig.tight_layout()
    return fig


def _draw_unavailable(ax: Axes, technique: Technique, reason: str | None) -> None:
    ax.set_title(f"{technique.display_name} (not available)")
    ax.text(
        0.5,
        0.5,
        reason or "not run",
        ha="center",
        va="center",
        wrap=True,
        fontsize=9,
        color="grey",
        transform=ax.transAxes,
    )
    ax.set_xticks([])
    ax.set_yticks([])


def plot_separation_scores(
    result: ReductionSuiteResult,
    figsize: tuple[int, int] = (8, 4),
) -> Figure:
    """Bar chart of the label silhouette score per technique (higher = better separated)."""
    scores = result.separation_scores().reset_index()
    fig, ax = plt.subplots(figsize=figsize)
    sns.barplot(data=scores, x="technique", y="silhouette", color="tab:blue", ax=ax)
    ax.axhline(0, color="black", linewidth=0.8)
    for i, row in scores.iterrows():
        if not row["available"]:
            ax.text(i, 0, "n/a", ha="center", va="bottom", color="grey")
    ax.set_xlabel("Technique")
    ax.set_ylabel("Silhouette score (2-D)")
    ax.set_title("Class Separation per Technique")
    fig.tight_layout()
    return fig


def plot_embedding_plotly(
    result: EmbeddingResult,
    point_labels: bool = False,
    height: int = 600,
    width: int = 800,
    cfg: PlottingConfig | None = None,
) -> go.Figure:
    """Interactive 2D scatter with one trace per class; hover shows the sample id.

    Implemented with Plotly's [:class:`plotly.graph_objects.Scatter`](https://plotly.com/python/line-and-scatter/).
    """
    x_col, y_col = result.pair.columns
    fig = go.Figure()

    if result.labels is None:
        groups = [("all", result.pair, None)]
    else:
        colors = label_palette(result.labels, cfg)
        labels = result.labels.astype(str)
        groups = [
            (name, result.pair[labels == name], colors[name])
            for name in label_order(result.labels)
            if (labels == name).any()
        ]

    for name, frame, color in groups:
        marker = {"size": 9, "opacity": 0.85}
        if color is not None:
            marker["color"] = "rgb({:.0f},{:.0f},{:.0f})".format(*(255 * c for c in color))
        fig.add_trace(
            go.Scatter(
                x=frame[x_col],
                y=frame[y_col],
                mode="markers+text" if point_labels else "markers",
                text=frame.index.astype(str),
                textposition="top center",
                marker=marker,
                name=name,
                hovertemplate=f"%{{text}}<br>{x_col}: %{{x:.3f}}<br>{y_col}: %{{y:.3f}}<extra>{name}</extra>",
            ),
        )

    fig.update_xaxes(title=x_col)
    fig.update_yaxes(title=y_col)
    fig.update_layout(
        title=f"{result.name} Embedding",
        width=width,
        height=height,
        template="plotly_white",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    return fig

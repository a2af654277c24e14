"""Dataset visualization functions."""

import math
from collections.abc import Callable, Iterator, Sequence
from functools import partial

import matplotlib.pyplot as plt
import seaborn as sns
from matplotlib.figure import Figure

from nci60_tlbx.data.base_dataset import BaseDataset
from nci60_tlbx.data.views import DatasetView
from nci60_tlbx.utils.plotting_config import PlottingConfig

from ._labels import label_order, label_palette


DEFAULT_BATCH_SIZE = 28


def plot_scaling_comparison(
    dataset: BaseDataset,
    columns: Sequence[str] | None = None,
    n_columns: int = 12,
    figsize: tuple[int, int] = (20, 12),
) -> Figure:
    """Plot boxplots of raw, standardized and min-max scaled descriptors.

    Args:
        dataset: Dataset instance with data to visualize
        columns: Descriptors to show (defaults to the first ``n_columns``)
        n_columns: Number of descriptors when ``columns`` is not given
        figsize: Figure size (width, height)

    Returns:
        matplotlib Figure object
    """
    cols = list(columns) if columns is not None else list(dataset.numeric_cols[:n_columns])

    fig, axs = plt.subplots(3, 1, figsize=figsize, sharex=True)
    panels = (
        ("Raw", dataset.df[cols]),
        ("Standardized (z-score)", dataset.df_standardized[cols]),
        ("Min-max scaled", dataset.df_min_max[cols]),
    )
    for ax, (title, frame) in zip(axs, panels, strict=True):
        sns.boxplot(data=frame, ax=ax)
        ax.tick_params(axis="x", rotation=45)
        ax.set_title(title)

    fig.tight_layout()
    return fig


def n_descriptor_batches(view: DatasetView, batch_size: int = DEFAULT_BATCH_SIZE) -> int:
    """Number of figures :func:`iter_descriptor_boxplots` yields."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    return math.ceil(len(view.numeric_cols) / batch_size)


def descriptor_batches(view: DatasetView, batch_size: int = DEFAULT_BATCH_SIZE) -> Iterator[list[str]]:
    """Consecutive descriptor batches of at most ``batch_size`` columns covering every descriptor."""
    for i in range(n_descriptor_batches(view, batch_size)):
        yield list(view.numeric_cols[i * batch_size : (i + 1) * batch_size])


def plot_descriptor_boxplots(
    view: DatasetView,
    columns: Sequence[str],
    figsize: tuple[float, float] | None = None,
    ncols: int = 7,
    cfg: PlottingConfig | None = None,
) -> Figure:
    """Faceted per-class boxplots, one facet per descriptor.

    Args:
        view: Dataset view carrying descriptors and labels
        columns: Descriptors to draw (one facet each)
        figsize: Figure size; defaults to 2.6 x 2.4 inches per facet
        ncols: Facets per row
        cfg: Plotting config providing the label palette
    """
    if view.labels is None:
        raise ValueError("DatasetView carries no label column to group the boxplots.")
    if not columns:
        raise ValueError("No descriptors to plot.")

    nrows = math.ceil(len(columns) / ncols)
    figsize = figsize or (2.6 * ncols, 2.4 * nrows)
    fig, axes = plt.subplots(nrows, ncols, figsize=figsize, squeeze=False, sharex=True)

    labels = view.labels.astype(str)
    order = label_order(view.labels)
    palette = label_palette(view.labels, cfg)
    for col, ax in zip(columns, axes.ravel(), strict=False):
        sns.boxplot(
            x=labels,
            y=view.df[col],
            hue=labels,
            order=order,
            hue_order=order,
            palette=palette,
            legend=False,
            fliersize=2,
            ax=ax,
        )
        ax.set_title(view.pretty_by_col.get(col, col), fontsize=9)
        ax.set_xlabel("")
        ax.set_ylabel("")
        ax.tick_params(axis="x", rotation=90, labelsize=7)
        ax.tick_params(axis="y", labelsize=7)

    for ax in axes.ravel()[len(columns) :]:
        ax.set_visible(False)

    fig.tight_layout()
    return fig


def descriptor_pages(
    view: DatasetView,
    batch_size: int = DEFAULT_BATCH_SIZE,
    ncols: int = 7,
    cfg: PlottingConfig | None = None,
) -> Iterator[tuple[int, list[str], Callable[[], Figure]]]:
    """Pages of the descriptor sweep as ``(page_index, columns, draw)``.

    ``draw()`` renders the page with its 1-based descriptor range in the title; nothing
    is drawn until it is called, so callers can skip, limit or guard single pages.
    """
    for i, cols in enumerate(descriptor_batches(view, batch_size)):
        yield i, cols, partial(plot_descriptor_batch, view, cols, i * batch_size, ncols=ncols, cfg=cfg)


def iter_descriptor_boxplots(
    view: DatasetView,
    batch_size: int = DEFAULT_BATCH_SIZE,
    ncols: int = 7,
    cfg: PlottingConfig | None = None,
) -> Iterator[tuple[int, list[str], Figure]]:
    """Sweep every descriptor in batches of ``batch_size`` faceted boxplots.

    Yields ``(batch_index, columns, figure)`` lazily so callers can save and close
    each figure before the next one is drawn.

    Example:
        >>> view = NCI60Dataset.from_csv().view()
        >>> for i, cols, fig in iter_descriptor_boxplots(view, batch_size=28):
        ...     fig.savefig(f"boxplots_{i:03d}.png")
        ...     plt.close(fig)
    """
    for i, cols, draw in descriptor_pages(view, batch_size, ncols=ncols, cfg=cfg):
        yield i, cols, draw()


def plot_descriptor_batch(
    view: DatasetView,
    columns: list[str],
    offset: int,
    ncols: int = 7,
    cfg: PlottingConfig | None = None,
) -> Figure:
    """One page of the descriptor sweep, titled with its 1-based descriptor range."""
    fig = plot_descriptor_boxplots(view, columns, ncols=min(ncols, len(columns)), cfg=cfg)
    fig.suptitle(f"Descriptors {offset + 1}-{offset + len(columns)} by cancer type", y=1.01)
    return fig

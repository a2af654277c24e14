"""Plotting utilities for data visualization."""

from .dataset_plots import (
    DEFAULT_BATCH_SIZE,
    descriptor_batches,
    descriptor_pages,
    iter_descriptor_boxplots,
    n_descriptor_batches,
    plot_descriptor_batch,
    plot_descriptor_boxplots,
    plot_scaling_comparison,
)
from .embedding_plots import (
    plot_embedding_grid,
    plot_embedding_plotly,
    plot_embedding_scatter,
    plot_separation_scores,
)
from .pca_plots import plot_explained_variance, plot_loadings_heatmap, plot_pca_scatter_matrix
from .quality_plots import plot_moment_scatter, plot_quality_flags


__all__ = [
    "DEFAULT_BATCH_SIZE",
    "descriptor_batches",
    "descriptor_pages",
    "iter_descriptor_boxplots",
    "n_descriptor_batches",
    "plot_descriptor_batch",
    "plot_descriptor_boxplots",
    "plot_embedding_grid",
    "plot_embedding_plotly",
    "plot_embedding_scatter",
    "plot_explained_variance",
    "plot_loadings_heatmap",
    "plot_moment_scatter",
    "plot_pca_scatter_matrix",
    "plot_quality_flags",
    "plot_scaling_comparison",
    "plot_separation_scores",
]

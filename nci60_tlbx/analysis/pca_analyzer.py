"""Principal component analysis of the standardized expression matrix."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal, Self

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA

from nci60_tlbx.data.views import DatasetView

from .base_analyser import BaseAnalyser


def _pc_names(k: int) -> list[str]:
    return [f"PC{i}" for i in range(1, k + 1)]


_LOADING_STRENGTH: dict[str, Callable[[pd.DataFrame], pd.Series]] = {
    "max": lambda block: block.abs().max(axis=1),
    "l2": lambda block: np.sqrt((block**2).sum(axis=1)),
}


@dataclass(frozen=True)
class PCAResult:
    """Everything the report needs from one PCA fit.

    Attributes:
        scores: Cell-line coordinates on ``PC1..PCk``; index is the sample index of the view.
        loadings: Gene weights, one unit-norm column per component (index = descriptor names).
            Component signs are arbitrary; use :func:`align_signs` before comparing fits.
        explained_variance: Columns ``PC``, ``variance`` (eigenvalue), ``explained_ratio`` and
            ``cumulative_ratio``, largest component first.
        top_features_global: Genes ordered by L2 loading strength over all fitted components.
        labels: Cancer type per row of ``scores`` (``None`` if the view had no label column).
    """

    scores: pd.DataFrame
    loadings: pd.DataFrame
    explained_variance: pd.DataFrame
    top_features_global: pd.Index
    labels: pd.Series | None = None

    # ------------------------------------------------------------------ plotting shortcuts
    def plot_explained_variance(self, **kwargs: object):
        """Scree plot with cumulative curve."""
        from nci60_tlbx.plotting.pca_plots import plot_explained_variance  # noqa: PLC0415

        return plot_explained_variance(self, **kwargs)

    def plot_scatter_matrix(self, **kwargs: object):
        """Pairwise scatter of the leading components coloured by cancer type."""
        from nci60_tlbx.plotting.pca_plots import plot_pca_scatter_matrix  # noqa: PLC0415

        return plot_pca_scatter_matrix(self, **kwargs)

    def plot_loadings_heatmap(self, **kwargs: object):
        """Heatmap of the strongest-loading genes."""
        from nci60_tlbx.plotting.pca_plots import plot_loadings_heatmap  # noqa: PLC0415

        return plot_loadings_heatmap(self, **kwargs)


class PCAAnalyzer(BaseAnalyser):
    """PCA of a dataset view via :class:`sklearn.decomposition.PCA`.

    The view is expected to carry standardized descriptors; the label column is
    never used as a feature. With 40 cell lines at most 40 components exist even
    though there are thousands of genes. The full LAPACK solver is used so two
    fits of the same matrix agree up to component signs.

    Example:
        >>> from nci60_tlbx.data import NCI60Dataset
        >>> pca = NCI60Dataset.from_csv().make_pca_analyzer().fit().result()
        >>> pca.explained_variance.head()
        >>> fig = pca.plot_scatter_matrix(n_components=5)
    """

    def __init__(self, view: DatasetView):
        self._view = view
        self._pca_model: PCA | None = None
        self._genes: list[str] = []

    def _fitted_model(self) -> PCA:
        if self._pca_model is None:
            raise ValueError("PCA model not fitted. Call fit() first.")
        return self._pca_model

    def fit(self, n_components: int | None = None, exclude_cols: list[str] | None = None) -> Self:
        """Fit on the view's descriptors, optionally leaving some genes out.

        Args:
            n_components: Components to keep (``None`` keeps min(n_samples, n_genes)).
            exclude_cols: Descriptors to drop before fitting.
        """
        features = self._view.features.drop(columns=exclude_cols or [], errors="ignore")
        if features.empty:
            raise ValueError("No features remaining after exclusions for PCA fitting.")

        self._genes = features.columns.to_list()
        self._pca_model = PCA(n_components=n_components, svd_solver="full").fit(features)
        return self

    @property
    def model(self) -> PCA:
        """The fitted scikit-learn estimator."""
        return self._fitted_model()

    def transform(self, n_components: int | None = None) -> pd.DataFrame:
        """Scores of the view's rows, optionally truncated to the first ``n_components``."""
        model = self._fitted_model()
        scores = model.transform(self._view.features.loc[:, self._genes])[:, :n_components]
        return pd.DataFrame(scores, index=self._view.df.index, columns=_pc_names(scores.shape[1]))

    def get_explained_variance(self) -> pd.DataFrame:
        """Per-component eigenvalue, explained ratio and running total."""
        model = self._fitted_model()
        ratio = model.explained_variance_ratio_
        return pd.DataFrame(
            {
                "PC": _pc_names(len(ratio)),
                "variance": model.explained_variance_,
                "explained_ratio": ratio,
                "cumulative_ratio": np.cumsum(ratio),
            },
        )

    def get_loading_vectors(self, component: int | None = None) -> pd.DataFrame | pd.Series:
        """Loadings of every component, or the 1-based ``component`` as a Series."""
        model = self._fitted_model()
        loadings = pd.DataFrame(model.components_.T, index=self._genes, columns=_pc_names(model.n_components_))
        if component is None:
            return loadings

        if not isinstance(component, int):
            raise TypeError(f"Component must be an integer, got {type(component).__name__}")
        name = f"PC{component}"
        if name not in loadings.columns:
            raise ValueError(f"Component {component} not found. Available: PC1-PC{model.n_components_}")
        return loadings[name]

    def get_top_loading_features(self, n_components: int = 3, method: Literal["max", "l2"] = "l2") -> pd.Index:
        """Genes ordered by loading strength over the first ``n_components`` components.

        ``"max"`` ranks by the largest absolute loading, ``"l2"`` by the Euclidean norm.
        """
        strength = _LOADING_STRENGTH.get(method.lower())
        if strength is None:
            raise ValueError("method must be one of {'max', 'l2'}")
        loadings = self.get_loading_vectors()
        return strength(loadings.iloc[:, :n_components]).sort_values(ascending=False).index

    def result(self) -> PCAResult:
        loadings = self.get_loading_vectors()
        return PCAResult(
            scores=self.transform(),
            loadings=loadings,
            explained_variance=self.get_explained_variance(),
            top_features_global=self.get_top_loading_features(n_components=loadings.shape[1]),
            labels=self._view.labels,
        )


def align_signs(scores: pd.DataFrame) -> pd.DataFrame:
    """Flip each component so its largest-magnitude score is positive.

    Removes the per-component sign ambiguity of PCA/SVD before comparing two fits.
    """
    values = scores.to_numpy()
    pivot = values[np.abs(values).argmax(axis=0), np.arange(values.shape[1])]
    return scores * np.where(pivot < 0, -1.0, 1.0)

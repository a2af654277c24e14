"""Six-technique dimensionality-reduction comparison (PCA, SVD, ICA, NMF, t-SNE, UMAP)."""

import logging
import warnings
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Self

import numpy as np
import pandas as pd
from sklearn.decomposition import NMF, FastICA
from sklearn.exceptions import ConvergenceWarning
from sklearn.manifold import TSNE
from sklearn.metrics import silhouette_score

from nci60_tlbx.data.views import DatasetView

from .base_analyser import BaseAnalyser
from .pca_analyzer import PCAAnalyzer, PCAResult


logger = logging.getLogger(__name__)

DEFAULT_SEED = 12345678


class Technique(StrEnum):
    """Supported reduction techniques, in report order."""

    PCA = "pca"
    SVD = "svd"
    ICA = "ica"
    NMF = "nmf"
    TSNE = "tsne"
    UMAP = "umap"

    @property
    def display_name(self) -> str:
        return {Technique.TSNE: "t-SNE"}.get(self, self.name)

    @property
    def column_prefix(self) -> str:
        return {
            Technique.PCA: "PC",
            Technique.SVD: "SV",
            Technique.ICA: "IC",
            Technique.NMF: "NMF",
            Technique.TSNE: "tSNE",
            Technique.UMAP: "UMAP",
        }[self]


@dataclass(frozen=True)
class ReductionConfig:
    """Parameters of every technique in the suite.

    ICA and NMF seeds default to ``None``: their solvers start from random
    initializations, so their embeddings differ between runs unless a seed is set
    (e.g. via :meth:`with_seed`).

    Attributes:
        techniques: Techniques to run, in order.
        pca_components: PCA components reported in the embedding (all are fitted).
        svd_components: Left singular vectors reported in the embedding.
        ica_components: Independent components to extract.
        nmf_components: Rank of the non-negative factorization.
        tsne_components: t-SNE output dimensions.
        umap_components: UMAP output dimensions.
        perplexity: t-SNE perplexity; must be below the number of samples.
        umap_n_neighbors: UMAP neighbourhood size (library default 15).
        nmf_init: NMF initialization scheme passed to scikit-learn.
        fail_on_convergence_warning: Treat solver convergence warnings as technique failures.
    """

    techniques: tuple[str, ...] = tuple(Technique)
    pca_components: int = 5
    svd_components: int = 5
    ica_components: int = 2
    nmf_components: int = 2
    tsne_components: int = 2
    umap_components: int = 2
    perplexity: float = 5.0
    umap_n_neighbors: int = 15
    tsne_random_state: int | None = DEFAULT_SEED
    umap_random_state: int | None = DEFAULT_SEED
    ica_random_state: int | None = None
    nmf_random_state: int | None = None
    ica_max_iter: int = 1000
    nmf_max_iter: int = 1000
    nmf_init: str = "random"
    fail_on_convergence_warning: bool = False

    def with_seed(self, seed: int | None) -> "ReductionConfig":
        """Copy with the same seed applied to every stochastic technique."""
        return replace(
            self,
            tsne_random_state=seed,
            umap_random_state=seed,
            ica_random_state=seed,
            nmf_random_state=seed,
        )

    def n_components(self, technique: Technique | str) -> int:
        return getattr(self, f"{Technique(technique).value}_components")


@dataclass(frozen=True)
class EmbeddingResult:
    """Low-dimensional embedding produced by one technique.

    Attributes:
        technique: Technique that produced the embedding.
        embedding: Frame of shape (n_samples, k), columns ``<prefix>1..k``, index aligned to the input.
        labels: Class labels aligned to ``embedding``.
        details: Technique-specific diagnostics (explained variance, singular values,
            reconstruction error, KL divergence, iteration counts, ...).
    """

    technique: Technique
    embedding: pd.DataFrame
    labels: pd.Series | None = None
    details: Mapping[str, object] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.technique.display_name

    @property
    def pair(self) -> pd.DataFrame:
        """The first two embedding dimensions (the ones shown in scatter plots)."""
        return self.embedding.iloc[:, :2]

    def with_labels(self) -> pd.DataFrame:
        """Embedding joined with the label column and tagged with the technique name."""
        frame = self.embedding.copy()
        if self.labels is not None:
            frame[self.labels.name or "label"] = self.labels
        return frame.assign(technique=self.name)

    def separation_score(self) -> float:
        """Silhouette score of the labels in the first two dimensions (NaN if undefined)."""
        if self.labels is None or self.embedding.shape[1] < 2:
            return float("nan")
        n_labels = self.labels.nunique()
        if not 2 <= n_labels <= len(self.labels) - 1:
            return float("nan")
        return float(silhouette_score(self.pair.to_numpy(), self.labels.astype(str).to_numpy()))

    def plot(self, **kwargs: object):
        """Scatter of the first two dimensions coloured by label."""
        from nci60_tlbx.plotting.embedding_plots import plot_embedding_scatter  # noqa: PLC0415

        return plot_embedding_scatter(self, **kwargs)


@dataclass(frozen=True)
class ReductionSuiteResult:
    """Embeddings of every technique that succeeded plus the failures of the others.

    Attributes:
        embeddings: Technique value (``"pca"``, ...) to its :class:`EmbeddingResult`.
        failures: Technique value to the error message of a technique that failed.
        config: Configuration the suite ran with.
        pca: Full PCA result (all components) when PCA ran.
    """

    embeddings: dict[str, EmbeddingResult]
    failures: dict[str, str]
    config: ReductionConfig
    pca: PCAResult | None = None

    def get(self, technique: Technique | str) -> EmbeddingResult | None:
        return self.embeddings.get(Technique(technique).value)

    @property
    def techniques(self) -> list[Technique]:
        """Requested techniques in report order, including failed ones."""
        return [Technique(t) for t in self.config.techniques]

    def separation_scores(self) -> pd.DataFrame:
        """Silhouette score per technique; failed techniques appear with NaN."""
        rows = []
        for technique in self.techniques:
            emb = self.get(technique)
            rows.append(
                {
                    "technique": technique.display_name,
                    "silhouette": emb.separation_score() if emb is not None else np.nan,
                    "available": emb is not None,
                },
            )
        return pd.DataFrame(rows).set_index("technique")

    def combined(self) -> pd.DataFrame:
        """Long frame of the two plotted dimensions of every embedding."""
        frames = []
        for emb in self.embeddings.values():
            pair = emb.pair.set_axis(["dim1", "dim2"], axis=1)
            frames.append(
                pair.assign(
                    technique=emb.name,
                    label=emb.labels if emb.labels is not None else pd.NA,
                ),
            )
        if not frames:
            return pd.DataFrame(columns=["dim1", "dim2", "technique", "label"])
        return pd.concat(frames)

    def plot_grid(self, **kwargs: object):
        """Multi-panel comparison of every technique."""
        from nci60_tlbx.plotting.embedding_plots import plot_embedding_grid  # noqa: PLC0415

        return plot_embedding_grid(self, **kwargs)


class ReductionSuite(BaseAnalyser):
    """Run PCA, SVD, ICA, NMF, t-SNE and UMAP on the same samples.

    Every technique is a direct call into scikit-learn, numpy or umap-learn and
    is independent of the others: NMF consumes the min-max view (factorization
    needs non-negative input), all others the standardized view. A technique
    that raises is logged and recorded in ``failures`` while the rest continue.

    Example:
        >>> from nci60_tlbx.data import NCI60Dataset
        >>> suite = NCI60Dataset.from_csv().make_reduction_suite().fit().result()
        >>> suite.separation_scores()
        >>> fig = suite.plot_grid()
    """

    def __init__(
        self,
        standardized: DatasetView,
        min_max: DatasetView,
        config: ReductionConfig | None = None,
    ) -> None:
        """Initialize the suite.

        Args:
            standardized: View with standardized descriptors (and labels)
            min_max: View with min-max scaled descriptors over the same samples
            config: Technique parameters (defaults to :class:`ReductionConfig`)

        Raises:
            ValueError: If the views are scaled incorrectly, cover different samples, or the
                configuration is invalid for the sample count.
        """
        self._standardized = standardized
        self._min_max = min_max
        self.config = config or ReductionConfig()
        self._embeddings: dict[str, EmbeddingResult] = {}
        self._failures: dict[str, str] = {}
        self._pca: PCAResult | None = None
        self._fitted = False

        if standardized.scaling != "standard":
            raise ValueError("The standardized view must carry standardized descriptors.")
        if min_max.scaling != "min_max":
            raise ValueError("The NMF view must carry min-max scaled descriptors.")
        if not standardized.df.index.equals(min_max.df.index):
            raise ValueError("Standardized and min-max views must cover the same samples.")
        self._validate_config()

    @property
    def n_samples(self) -> int:
        return len(self._standardized.df)

    def _validate_config(self) -> None:
        cfg = self.config
        try:
            techniques = [Technique(t) for t in cfg.techniques]
        except ValueError as exc:
            raise ValueError(f"Unknown technique in {cfg.techniques}; use {[t.value for t in Technique]}") from exc
        duplicates = sorted({t.value for t in techniques if techniques.count(t) > 1})
        if duplicates:
            raise ValueError(f"Duplicate techniques requested: {duplicates}")

        for technique in techniques:
            if cfg.n_components(technique) < 1:
                raise ValueError(f"{technique.display_name} needs at least one component.")
        if Technique.TSNE in techniques and not 0 < cfg.perplexity < self.n_samples:
            raise ValueError(f"perplexity must be in (0, {self.n_samples}), got {cfg.perplexity}")
        if Technique.UMAP in techniques and not 1 < cfg.umap_n_neighbors < self.n_samples:
            raise ValueError(f"umap_n_neighbors must be in (1, {self.n_samples}), got {cfg.umap_n_neighbors}")

    def fit(self) -> Self:
        """Run every configured technique; failures are recorded, not raised."""
        self._embeddings, self._failures, self._pca = {}, {}, None
        runners: dict[Technique, Callable[[], EmbeddingResult]] = {
            Technique.PCA: self._fit_pca,
            Technique.SVD: self._fit_svd,
            Technique.ICA: self._fit_ica,
            Technique.NMF: self._fit_nmf,
            Technique.TSNE: self._fit_tsne,
            Technique.UMAP: self._fit_umap,
        }

        for technique in map(Technique, self.config.techniques):
            logger.info("Running %s", technique.display_name)
            try:
                self._embeddings[technique.value] = self._run_guarded(technique, runners[technique])
            except Exception as exc:
                logger.exception("%s failed; it will be reported as unavailable", technique.display_name)
                self._failures[technique.value] = f"{type(exc).__name__}: {exc}"

        self._fitted = True
        return self

    def _run_guarded(self, technique: Technique, runner: Callable[[], EmbeddingResult]) -> EmbeddingResult:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            if self.config.fail_on_convergence_warning:
                warnings.simplefilter("error", ConvergenceWarning)
            result = runner()

        for warning in caught:
            logger.warning("%s: %s", technique.display_name, warning.message)

        expected = (self.n_samples, self.config.n_components(technique))
        if result.embedding.shape != expected:
            raise ValueError(f"{technique.display_name} produced shape {result.embedding.shape}, expected {expected}")
        return result

    def _frame(self, values: np.ndarray, technique: Technique) -> pd.DataFrame:
        return pd.DataFrame(
            values,
            index=self._standardized.df.index,
            columns=[f"{technique.column_prefix}{i + 1}" for i in range(values.shape[1])],
        )

    def _embedding(self, technique: Technique, values: np.ndarray, **details: object) -> EmbeddingResult:
        return EmbeddingResult(
            technique=technique,
            embedding=self._frame(values, technique),
            labels=self._standardized.labels,
            details=details,
        )

    def _fit_pca(self) -> EmbeddingResult:
        k = self.config.pca_components
        pca = PCAAnalyzer(self._standardized).fit(n_components=None).result()
        if pca.scores.shape[1] < k:
            raise ValueError(f"Only {pca.scores.shape[1]} principal components available, {k} requested.")
        self._pca = pca
        return EmbeddingResult(
            technique=Technique.PCA,
            embedding=pca.scores.iloc[:, :k],
            labels=self._standardized.labels,
            details={"explained_variance": pca.explained_variance.iloc[:k]},
        )

    def _fit_svd(self) -> EmbeddingResult:
        k = self.config.svd_components
        x = self._standardized.features.to_numpy(dtype=float)
        u, s, _ = np.linalg.svd(x, full_matrices=False)
        if u.shape[1] < k:
            raise ValueError(f"Only {u.shape[1]} singular vectors available, {k} requested.")
        energy = s**2 / np.sum(s**2)
        return self._embedding(Technique.SVD, u[:, :k], singular_values=s[:k], energy_ratio=energy[:k])

    def _fit_ica(self) -> EmbeddingResult:
        model = FastICA(
            n_components=self.config.ica_components,
            whiten="unit-variance",
            max_iter=self.config.ica_max_iter,
            random_state=self.config.ica_random_state,
        )
        sources = model.fit_transform(self._standardized.features.to_numpy(dtype=float))
        return self._embedding(Technique.ICA, sources, n_iter=model.n_iter_)

    def _fit_nmf(self) -> EmbeddingResult:
        model = NMF(
            n_components=self.config.nmf_components,
            init=self.config.nmf_init,
            max_iter=self.config.nmf_max_iter,
            random_state=self.config.nmf_random_state,
        )
        w = model.fit_transform(self._min_max.features.to_numpy(dtype=float))
        return self._embedding(
            Technique.NMF,
            w,
            reconstruction_err=float(model.reconstruction_err_),
            n_iter=model.n_iter_,
        )

    def _fit_tsne(self) -> EmbeddingResult:
        model = TSNE(
            n_components=self.config.tsne_components,
            perplexity=self.config.perplexity,
            init="pca",
            random_state=self.config.tsne_random_state,
        )
        coords = model.fit_transform(self._standardized.features.to_numpy(dtype=float))
        return self._embedding(Technique.TSNE, coords, kl_divergence=float(model.kl_divergence_))

    def _fit_umap(self) -> EmbeddingResult:
        import umap  # noqa: PLC0415

        model = umap.UMAP(
            n_components=self.config.umap_components,
            n_neighbors=self.config.umap_n_neighbors,
            random_state=self.config.umap_random_state,
        )
        coords = model.fit_transform(self._standardized.features.to_numpy(dtype=float))
        return self._embedding(Technique.UMAP, np.asarray(coords))

    def result(self) -> ReductionSuiteResult:
        """Return the embeddings and failures.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        if not self._fitted:
            raise ValueError("Must call fit() before result()")

        return ReductionSuiteResult(
            embeddings=dict(self._embeddings),
            failures=dict(self._failures),
            config=self.config,
            pca=self._pca,
        )

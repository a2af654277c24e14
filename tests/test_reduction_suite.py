"""Tests for the six-technique ReductionSuite."""

import math

import numpy as np
import pandas as pd
import pytest

from nci60_tlbx.analysis import (
    EmbeddingResult,
    ReductionConfig,
    ReductionSuite,
    ReductionSuiteResult,
    Technique,
)


EXPECTED_COLUMNS = {
    "pca": ["PC1", "PC2", "PC3", "PC4", "PC5"],
    "svd": ["SV1", "SV2", "SV3", "SV4", "SV5"],
    "ica": ["IC1", "IC2"],
    "nmf": ["NMF1", "NMF2"],
    "tsne": ["tSNE1", "tSNE2"],
    "umap": ["UMAP1", "UMAP2"],
}


@pytest.fixture(scope="module")
def suite_result(nci60_dataset, fast_reduction_config) -> ReductionSuiteResult:
    return nci60_dataset.make_reduction_suite(config=fast_reduction_config).fit().result()


class TestTechnique:
    """Test technique naming."""

    def test_report_order(self) -> None:
        assert [t.value for t in Technique] == ["pca", "svd", "ica", "nmf", "tsne", "umap"]

    def test_display_names(self) -> None:
        assert Technique.TSNE.display_name == "t-SNE"
        assert Technique.UMAP.display_name == "UMAP"


class TestReductionConfig:
    """Test configuration defaults and helpers."""

    def test_defaults(self) -> None:
        cfg = ReductionConfig()
        assert [cfg.n_components(t) for t in Technique] == [5, 5, 2, 2, 2, 2]
        assert cfg.perplexity == 5.0
        assert cfg.tsne_random_state == 12345678
        assert cfg.ica_random_state is None
        assert cfg.nmf_random_state is None

    def test_with_seed(self) -> None:
        cfg = ReductionConfig().with_seed(1)
        assert {cfg.tsne_random_state, cfg.umap_random_state, cfg.ica_random_state, cfg.nmf_random_state} == {1}


class TestReductionSuite:
    """Test the suite on the synthetic dataset."""

    def test_every_technique_succeeds(self, suite_result: ReductionSuiteResult) -> None:
        assert suite_result.failures == {}
        assert set(suite_result.embeddings) == set(EXPECTED_COLUMNS)

    @pytest.mark.parametrize("technique", list(EXPECTED_COLUMNS))
    def test_embedding_shape(self, suite_result: ReductionSuiteResult, technique: str) -> None:
        emb = suite_result.get(technique)
        assert isinstance(emb, EmbeddingResult)
        assert emb.embedding.shape == (40, len(EXPECTED_COLUMNS[technique]))
        assert emb.embedding.columns.to_list() == EXPECTED_COLUMNS[technique]
        assert np.isfinite(emb.embedding.to_numpy()).all()

    def test_embeddings_keep_sample_index(self, suite_result: ReductionSuiteResult, nci60_dataset) -> None:
        for emb in suite_result.embeddings.values():
            assert emb.embedding.index.equals(nci60_dataset.df.index)
            assert emb.labels.to_list() == nci60_dataset.df["label"].to_list()

    def test_nmf_is_non_negative(self, suite_result: ReductionSuiteResult) -> None:
        assert (suite_result.get("nmf").embedding.to_numpy() >= 0).all()

    def test_pca_matches_analyzer(self, suite_result: ReductionSuiteResult) -> None:
        assert suite_result.pca is not None
        pd.testing.assert_frame_equal(suite_result.get("pca").embedding, suite_result.pca.scores.iloc[:, :5])

    def test_svd_vectors_are_orthonormal(self, suite_result: ReductionSuiteResult) -> None:
        u = suite_result.get("svd").embedding.to_numpy()
        np.testing.assert_allclose(u.T @ u, np.eye(5), atol=1e-8)

    def test_with_labels(self, suite_result: ReductionSuiteResult) -> None:
        frame = suite_result.get("tsne").with_labels()
        assert frame.columns.to_list() == ["tSNE1", "tSNE2", "label", "technique"]
        assert (frame["technique"] == "t-SNE").all()

    def test_separation_scores(self, suite_result: ReductionSuiteResult) -> None:
        scores = suite_result.separation_scores()
        assert scores.index.to_list() == ["PCA", "SVD", "ICA", "NMF", "t-SNE", "UMAP"]
        assert scores["available"].all()
        assert scores["silhouette"].between(-1, 1).all()

    def test_combined(self, suite_result: ReductionSuiteResult) -> None:
        combined = suite_result.combined()
        assert len(combined) == 6 * 40
        assert set(combined["technique"]) == {"PCA", "SVD", "ICA", "NMF", "t-SNE", "UMAP"}

    def test_seeded_tsne_is_reproducible(self, nci60_dataset, fast_reduction_config) -> None:
        cfg = ReductionConfig(techniques=("tsne",), tsne_random_state=fast_reduction_config.tsne_random_state)
        first = nci60_dataset.make_reduction_suite(config=cfg).fit().result()
        second = nci60_dataset.make_reduction_suite(config=cfg).fit().result()
        pd.testing.assert_frame_equal(
            first.get("tsne").embedding,
            second.get("tsne").embedding,
            check_exact=False,
            atol=1e-6,
        )

    def test_result_before_fit_raises(self, nci60_dataset) -> None:
        with pytest.raises(ValueError, match=r"fit\(\)"):
            nci60_dataset.make_reduction_suite().result()


class TestFailureIsolation:
    """A failing technique is recorded and the others still run."""

    def test_failing_technique_is_recorded(self, nci60_dataset, monkeypatch) -> None:
        def _boom(self):
            raise RuntimeError("solver exploded")

        monkeypatch.setattr(ReductionSuite, "_fit_ica", _boom)
        cfg = ReductionConfig(techniques=("pca", "ica", "svd"))
        result = nci60_dataset.make_reduction_suite(config=cfg).fit().result()

        assert result.failures == {"ica": "RuntimeError: solver exploded"}
        assert set(result.embeddings) == {"pca", "svd"}
        assert result.get("ica") is None
        scores = result.separation_scores()
        assert not scores.loc["ICA", "available"]
        assert math.isnan(scores.loc["ICA", "silhouette"])

    def test_convergence_warning_can_fail_technique(self, nci60_dataset) -> None:
        cfg = ReductionConfig(
            techniques=("ica",),
            ica_max_iter=1,
            ica_random_state=0,
            fail_on_convergence_warning=True,
        )
        result = nci60_dataset.make_reduction_suite(config=cfg).fit().result()
        assert "ica" in result.failures
        assert "ConvergenceWarning" in result.failures["ica"]

    def test_wrong_component_count_is_a_failure(self, nci60_dataset) -> None:
        cfg = ReductionConfig(techniques=("pca",), pca_components=41)
        result = nci60_dataset.make_reduction_suite(config=cfg).fit().result()
        assert "pca" in result.failures


class TestValidation:
    """Invalid configurations are rejected up front."""

    @pytest.mark.parametrize(
        ("kwargs", "match"),
        [
            ({"techniques": ("pca", "lda")}, r"Unknown technique"),
            ({"techniques": ("pca", "tsne", "pca")}, r"Duplicate techniques"),
            ({"perplexity": 40.0}, r"perplexity"),
            ({"umap_n_neighbors": 1}, r"umap_n_neighbors"),
            ({"ica_components": 0}, r"at least one component"),
        ],
    )
    def test_invalid_config_raises(self, nci60_dataset, kwargs, match) -> None:
        with pytest.raises(ValueError, match=match):
            nci60_dataset.make_reduction_suite(config=ReductionConfig(**kwargs))

    def test_wrong_view_scaling_raises(self, nci60_dataset) -> None:
        with pytest.raises(ValueError, match=r"standardized"):
            ReductionSuite(nci60_dataset.view(scaling="none"), nci60_dataset.view(scaling="min_max"))

    def test_mismatched_samples_raise(self, nci60_dataset) -> None:
        std = nci60_dataset.view(scaling="standard")
        mm = nci60_dataset.view(scaling="min_max")
        shifted = type(mm)(
            df=mm.df.iloc[1:],
            pretty_by_col=mm.pretty_by_col,
            numeric_cols=mm.numeric_cols,
            label_col=mm.label_col,
            scaling="min_max",
        )
        with pytest.raises(ValueError, match=r"same samples"):
            ReductionSuite(std, shifted)
